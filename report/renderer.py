"""
Report renderer: text, Markdown, CSV, JSON and HTML views of a contributor summary.
HTML is rendered with Jinja2 from report/templates/summary.html.j2.
"""

import csv
import io
import json
import os
from typing import Any, Dict, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from correlate.models import ContributorSummary

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), 'templates')
HTML_TEMPLATE = 'summary.html.j2'

CSV_HEADER = ['author', 'comments', 'scored', 'grouped', 'words', 'original', 'log_adjusted', 'exponential', 'quality']
FORMATS = ('text', 'md', 'csv', 'json', 'html')


def render_text(summaries: Sequence[ContributorSummary]) -> str:
    """Render a simple plain-text summary."""
    if not summaries:
        return "No contributors."
    return "\n\n".join(str(s) for s in summaries)


def _quality(s: ContributorSummary) -> str:
    return '-' if s.quality is None else f"{s.quality:.2f}"


def render_markdown(summaries: Sequence[ContributorSummary], scope: Optional[str] = None) -> str:
    md = ["# Contributor Summary\n"]
    if scope:
        md.append(f"_Scope: {scope}_\n")
    if not summaries:
        md.append("_No contributors._")
        return "\n".join(md)
    md.append("| Author | Comments | Words | Original | Log adjusted | Exponential | Quality |")
    md.append("|---|---:|---:|---:|---:|---:|---:|")
    for s in summaries:
        md.append(f"| {s.author} | {s.comment_count} | {s.word_count} | "
                  f"{s.original:.2f} | {s.log_adjusted:.2f} | {s.exponential:.2f} | {_quality(s)} |")
    return "\n".join(md)


def _csv_row(s: ContributorSummary) -> list:
    return [
        s.author,
        s.comment_count,
        s.scored_count,
        s.grouped_count,
        s.word_count,
        f"{s.original:.4f}",
        f"{s.log_adjusted:.4f}",
        f"{s.exponential:.4f}",
        '' if s.quality is None else f"{s.quality:.4f}",
    ]


def render_csv(summaries: Sequence[ContributorSummary]) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_HEADER)
    for s in summaries:
        writer.writerow(_csv_row(s))
    return output.getvalue()


def render_json(summaries: Sequence[ContributorSummary], scope: Optional[str] = None,
                generated_at: Optional[str] = None) -> str:
    doc: Dict[str, Any] = {
        'scope': scope,
        'generated_at': generated_at,
        'contributors': [s.to_dict() for s in summaries],
    }
    return json.dumps(doc, indent=2)


def _environment() -> Environment:
    return Environment(loader=FileSystemLoader(TEMPLATE_DIR), autoescape=select_autoescape(['html', 'xml', 'j2']))


def render_html(summaries: Sequence[ContributorSummary], scope: Optional[str] = None,
                generated_at: Optional[str] = None) -> str:
    tmpl = _environment().get_template(HTML_TEMPLATE)
    totals = {
        'comments': sum(s.comment_count for s in summaries),
        'words': sum(s.word_count for s in summaries),
        'exponential': sum(s.exponential for s in summaries),
    }
    return tmpl.render(contributors=list(summaries), scope=scope, generated_at=generated_at, totals=totals)


def render(summaries: Sequence[ContributorSummary], fmt: str = 'text', scope: Optional[str] = None,
           generated_at: Optional[str] = None) -> str:
    """Main render function; *fmt* is one of text, md, csv, json or html."""
    fmt_l = (fmt or 'text').lower()
    if fmt_l in ('md', 'markdown'):
        return render_markdown(summaries, scope)
    if fmt_l == 'csv':
        return render_csv(summaries)
    if fmt_l in ('html', 'htm'):
        return render_html(summaries, scope, generated_at)
    if fmt_l == 'json':
        return render_json(summaries, scope, generated_at)
    return render_text(summaries)
