"""
CLI entry point for contrib_score. Wires the pipeline: load dump -> group -> score -> report.
Works on already-fetched JSON dumps only; no network access.
"""

import argparse
import asyncio
import json
import os
import sys
import webbrowser
from datetime import datetime, timezone
from typing import Any, List, Optional

from common.logger import get_logger
from core.errors import ConfigurationError
from core.workflow import WorkflowConfig, load_workflow
from correlate.models import ContributorSummary
from correlate.summary import merge_summaries
from evaluator import analyze_comments, assess_quality, attach_quality
from ingest.comments import load_discussion
from normalize.models import Comment
from report.renderer import FORMATS, render

logger = get_logger("cli")

EXPORT_FORMATS = ('html', 'md', 'csv', 'json')
FILE_FORMATS = ('html', 'md', 'csv')


def _load_json_file(path: str, description: str):
    """Load a JSON file and return the parsed object, or None on failure."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        print(f"Failed to read {description} {path}: {e}", file=sys.stderr)
        return None


def default_scope(doc: Any) -> str:
    """'pr' for pull request dumps, 'issue' for issue dumps, 'conversation' otherwise."""
    if not isinstance(doc, dict) or not isinstance(doc.get('details'), dict):
        return 'conversation'
    details = doc['details']
    if 'merged_at' in details or 'head' in details or '/pull/' in str(details.get('html_url', '')):
        return 'pr'
    return 'issue'


def _summarize(comments: List[Comment], scope: str, workflow: WorkflowConfig, grouping: bool,
               quality: bool) -> List[ContributorSummary]:
    policy = workflow.build_policy()
    run = analyze_comments(comments, scope, policy=policy, grouping=grouping)
    summaries = run.summary(policy)
    if quality:
        chain = workflow.build_chain(policy=policy)
        results = asyncio.run(assess_quality(run.comments, chain, scope))
        attach_quality(summaries, run.comments, results)
    return summaries


def run_pipeline(args, workflow: WorkflowConfig):
    """Load the dump, analyze it and return the contributor summaries with their scope label."""
    doc = _load_json_file(args.input, 'input file')
    if doc is None:
        return None, None
    comments, linked = load_discussion(doc)
    logger.info("loaded %d comment(s) and %d linked comment(s) from %s", len(comments), len(linked), args.input)
    scope = args.scope or default_scope(doc)
    grouping = workflow.grouping_enabled and not args.no_grouping
    quality = not args.no_quality

    summaries = _summarize(comments, scope, workflow, grouping, quality)
    if linked:
        summaries = merge_summaries(summaries, _summarize(linked, 'pr', workflow, grouping, quality))
        scope = f"{scope} + linked pr"
    return summaries, scope


def _open_file_in_browser(path: str):
    """Open a file URL in the system default web browser."""
    webbrowser.open("file://" + os.path.abspath(path))


def _default_base() -> str:
    return f"contrib_score_{datetime.now(timezone.utc).strftime('%Y%m%dT%H%M%SZ')}"


def _default_out_path(ext: str) -> str:
    return f"{_default_base()}.{ext}"


def _write_report_file(out_path: str, content: str, open_html: bool = False):
    out_dir = os.path.dirname(out_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    # newline='' keeps csv line endings intact
    with open(out_path, 'w', encoding='utf-8', newline='') as fh:
        fh.write(content)
    print(f"Wrote report to {out_path}")
    if open_html:
        try:
            _open_file_in_browser(out_path)
        except webbrowser.Error:
            print("Failed to open browser automatically; file saved at", out_path)


def write_output(fmt: str, rendered: str, args):
    """Write output to file or stdout and optionally open HTML in browser."""
    if fmt in FILE_FORMATS or args.out_file.strip():
        out_path = args.out_file.strip() or _default_out_path(fmt)
        _write_report_file(out_path, rendered, open_html=(args.open and fmt == 'html'))
    else:
        print(rendered)


def export_all(summaries, scope: str, generated_at: str, args):
    base = os.path.splitext(args.out_file.strip())[0] or _default_base()
    for fmt in EXPORT_FORMATS:
        content = render(summaries, fmt=fmt, scope=scope, generated_at=generated_at)
        _write_report_file(f"{base}.{fmt}", content, open_html=(fmt == 'html' and args.open))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Comment quality scoring CLI")
    parser.add_argument("--input", type=str, default="", help="Path to a JSON discussion dump")
    parser.add_argument("--scope", type=str, default="", help="Context scope label (default: derived from the dump)")
    parser.add_argument("--output", type=str, choices=FORMATS, default="html", help="Output format")
    parser.add_argument("--out-file", type=str, default="", help="Output file path. If omitted a default name will be used")
    parser.add_argument("--open", action="store_true", help="Open the generated HTML report in the default browser")
    parser.add_argument("--config", type=str, default=None, help="Workflow YAML (default: $CONTRIB_SCORE_CONFIG or config/workflow.yaml)")
    parser.add_argument("--preset", type=str, default="", help="Named scorer-weight preset from the workflow file")
    parser.add_argument("--list-presets", action="store_true", help="List available presets and exit")
    parser.add_argument("--no-grouping", action="store_true", help="Score every comment individually")
    parser.add_argument("--no-quality", action="store_true", help="Skip the content-quality stage chain")
    parser.add_argument("--export-all", action="store_true", help="Write HTML, MD, CSV and JSON copies")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        workflow = load_workflow(args.config)
        if args.list_presets:
            for name in workflow.list_presets():
                print(name)
            return 0
        if args.preset:
            workflow = workflow.apply_preset(args.preset)
        if not args.input:
            parser.error("--input is required")
        summaries, scope = run_pipeline(args, workflow)
    except ConfigurationError as ex:
        print(str(ex), file=sys.stderr)
        return 2
    except ValueError as ex:
        print(f"Invalid input {args.input}: {ex}", file=sys.stderr)
        return 1

    if summaries is None:
        return 1

    generated_at = datetime.now(timezone.utc).isoformat()
    if args.export_all:
        export_all(summaries, scope, generated_at, args)
        return 0

    rendered = render(summaries, fmt=args.output, scope=scope, generated_at=generated_at)
    write_output(args.output, rendered, args)
    return 0


if __name__ == "__main__":
    sys.exit(main())
