"""
Technical-quality scorer: code block hygiene, technical vocabulary and
explanation structure, combined with configurable weights.
"""
import re
from typing import Dict, List, Optional, Tuple

from common.logger import get_logger
from core.errors import ConfigurationError
from scoring.scorers.base import BaseScorer, ScorerResult

logger = get_logger("technical")

DEFAULT_WEIGHTS = {
    'code_block_quality': 0.4,
    'technical_terms': 0.3,
    'explanation_quality': 0.3,
}

TECHNICAL_TERMS = frozenset({
    'api', 'async', 'await', 'function', 'class', 'interface', 'type', 'const',
    'let', 'var', 'import', 'export', 'return', 'promise', 'callback',
    'parameter', 'argument', 'method', 'property', 'object', 'array', 'string',
    'number', 'boolean', 'null', 'undefined', 'try', 'catch', 'throw', 'error',
})

_CODE_BLOCK = re.compile(r'```[\s\S]*?```')
_FENCE = re.compile(r'```.*\n?')
_EXAMPLES = re.compile(r'for example|e\.g\.|i\.e\.|such as')


def split_code_blocks(content: str) -> Tuple[List[str], str]:
    """Return (code blocks, remaining text)."""
    blocks = _CODE_BLOCK.findall(content or '')
    return blocks, _CODE_BLOCK.sub('', content or '')


def code_block_quality(blocks: List[str]) -> float:
    if not blocks:
        return 0.0
    total = 0.0
    for block in blocks:
        code = _FENCE.sub('', block).strip()
        quality = 0.0
        if re.search(r'^[ ]{2,}|\t', code, re.MULTILINE):
            quality += 0.3
        if re.search(r'//|/\*|\*|#', code):
            quality += 0.2
        if all(len(line) <= 80 for line in code.split('\n')):
            quality += 0.2
        if re.search(r'[a-z][A-Z][a-z]|[a-z]_[a-z]', code):
            quality += 0.3
        total += quality
    return total / len(blocks)


def technical_term_quality(text: str) -> Tuple[float, int]:
    words = [w for w in re.split(r'\W+', (text or '').lower()) if w]
    if not words:
        return 0.0, 0
    hits = [w for w in words if w in TECHNICAL_TERMS]
    density = len(hits) / len(words)
    variety = len(set(hits)) / len(TECHNICAL_TERMS)
    return (density + variety) / 2, len(hits)


def explanation_quality(text: str) -> Tuple[float, int]:
    lines = [line for line in (text or '').split('\n') if line.strip()]
    if not lines:
        return 0.0, 0

    quality = 0.0
    if any(re.match(r'^#{2,}\s+\w+', line) for line in lines):
        quality += 0.2
    if any(re.match(r'^[-*]\s+\w+', line) for line in lines):
        quality += 0.2

    paragraphs = [p for p in re.split(r'\n\s*\n', text) if p.strip()]
    good = [p for p in paragraphs if 3 <= len(p.strip().split('\n')) <= 10]
    quality += 0.3 * (len(good) / len(paragraphs))

    if _EXAMPLES.search(text.lower()):
        quality += 0.3
    return quality, len(lines)


class TechnicalScorer(BaseScorer):
    """
    Combines the three aspect scores with *weights*. Aspect weights must be
    non-negative and are rescaled to sum to 1, so the result stays in [0, 1].
    """
    id = 'technical'

    def __init__(self, weights: Optional[Dict[str, float]] = None, debug: bool = False):
        super().__init__(debug=debug)
        merged = dict(DEFAULT_WEIGHTS)
        for key, value in (weights or {}).items():
            if key not in DEFAULT_WEIGHTS:
                raise ConfigurationError(f'technical.weights.{key}', 'unknown aspect')
            if value is None or float(value) < 0:
                raise ConfigurationError(f'technical.weights.{key}', 'must be a non-negative number')
            merged[key] = float(value)
        total = sum(merged.values())
        if total <= 0:
            raise ConfigurationError('technical.weights', 'total weight must be greater than zero')
        self.weights = {key: value / total for key, value in merged.items()}

    async def score(self, content: str) -> ScorerResult:
        blocks, remaining = split_code_blocks(content)
        code_score = self.normalize(code_block_quality(blocks) * 100)
        term_quality, term_count = technical_term_quality(remaining)
        term_score = self.normalize(term_quality * 100)
        expl_quality, expl_lines = explanation_quality(remaining)
        explanation_score = self.normalize(expl_quality * 100)

        combined = (code_score * self.weights['code_block_quality']
                    + term_score * self.weights['technical_terms']
                    + explanation_score * self.weights['explanation_quality'])

        metrics = {
            'code_block_score': code_score,
            'technical_term_score': term_score,
            'explanation_score': explanation_score,
            'code_block_count': len(blocks),
            'technical_term_count': term_count,
            'explanation_lines': expl_lines,
        }
        if self.debug:
            logger.debug("technical metrics: %s", metrics)

        return ScorerResult(raw_score=combined * 100, normalized_score=self.clamp(combined), metrics=metrics)
