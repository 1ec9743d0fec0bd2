"""
Readability scorer based on the Flesch reading-ease formula.
Text statistics (sentences, words, syllables) are estimated with regular
expressions; the score is normalized by its distance from a target value.
"""
import math
import re
from typing import Any, Dict, List

from common.logger import get_logger
from scoring.scorers.base import BaseScorer, ScorerResult

logger = get_logger("readability")

DEFAULT_TARGET_SCORE = 60.0

_SENTENCE_END = re.compile(r'[.!?]+(?:\s|$)')
_WORD = re.compile(r"[A-Za-z0-9]+(?:['-][A-Za-z0-9]+)*")
_VOWELS = 'aeiouy'


def estimate_syllables(word: str) -> int:
    """Estimate the syllable count of an English word from its vowel groups."""
    word = word.lower()
    count = 0
    previous_was_vowel = False
    for char in word:
        is_vowel = char in _VOWELS
        if is_vowel and not previous_was_vowel:
            count += 1
        previous_was_vowel = is_vowel

    # silent e
    if word.endswith('e') and count > 1:
        count -= 1
    if word.endswith('le') and len(word) > 2 and word[-3] not in _VOWELS:
        count += 1
    return max(1, count)


def words_of(text: str) -> List[str]:
    return _WORD.findall(text or '')


def sentence_count(text: str) -> int:
    if not (text or '').strip():
        return 0
    return max(1, len(_SENTENCE_END.findall(text.strip())))


def text_statistics(text: str) -> Dict[str, Any]:
    words = words_of(text)
    n_words = len(words)
    n_sentences = sentence_count(text)
    syllables = [estimate_syllables(w) for w in words]
    n_syllables = sum(syllables)
    return {
        'sentences': n_sentences,
        'words': n_words,
        'syllables': n_syllables,
        'characters': sum(len(w) for w in words),
        'polysyllables': sum(1 for s in syllables if s >= 3),
        'words_per_sentence': n_words / n_sentences if n_sentences else 0.0,
        'syllables_per_word': n_syllables / n_words if n_words else 0.0,
    }


def flesch_reading_ease(stats: Dict[str, Any]) -> float:
    if not stats['words']:
        return 0.0
    return 206.835 - 1.015 * stats['words_per_sentence'] - 84.6 * stats['syllables_per_word']


def flesch_kincaid_grade(stats: Dict[str, Any]) -> float:
    if not stats['words']:
        return 0.0
    return 0.39 * stats['words_per_sentence'] + 11.8 * stats['syllables_per_word'] - 15.59


def gunning_fog(stats: Dict[str, Any]) -> float:
    if not stats['words']:
        return 0.0
    return 0.4 * (stats['words_per_sentence'] + 100.0 * stats['polysyllables'] / stats['words'])


def coleman_liau(stats: Dict[str, Any]) -> float:
    if not stats['words']:
        return 0.0
    letters = stats['characters'] / stats['words'] * 100.0
    sentences = stats['sentences'] / stats['words'] * 100.0
    return 0.0588 * letters - 0.296 * sentences - 15.8


def smog_index(stats: Dict[str, Any]) -> float:
    if not stats['sentences']:
        return 0.0
    return 1.043 * math.sqrt(stats['polysyllables'] * 30.0 / stats['sentences']) + 3.1291


def automated_readability_index(stats: Dict[str, Any]) -> float:
    if not stats['words']:
        return 0.0
    return 4.71 * stats['characters'] / stats['words'] + 0.5 * stats['words_per_sentence'] - 21.43


class ReadabilityScorer(BaseScorer):
    """
    Scores text by how close its Flesch reading ease is to *target_score*.

    With ``include_all_metrics`` the result metrics also carry the
    Flesch-Kincaid grade, Gunning fog, Coleman-Liau, SMOG and ARI indices
    plus the raw text statistics.
    """

    id = 'readability'

    def __init__(self, target_score: float = DEFAULT_TARGET_SCORE, include_all_metrics: bool = False,
                 debug: bool = False):
        super().__init__(debug=debug)
        self.target_score = float(target_score)
        self.include_all_metrics = include_all_metrics

    async def score(self, content: str) -> ScorerResult:
        stats = text_statistics(content)
        ease = flesch_reading_ease(stats)

        distance = abs(ease - self.target_score)
        normalized = self.normalize(100.0 - distance)

        metrics: Dict[str, Any] = {'flesch_reading_ease': ease}
        if self.include_all_metrics:
            metrics.update({
                'flesch_kincaid_grade': flesch_kincaid_grade(stats),
                'gunning_fog_index': gunning_fog(stats),
                'coleman_liau_index': coleman_liau(stats),
                'smog_index': smog_index(stats),
                'automated_readability_index': automated_readability_index(stats),
                'text_stats': stats,
            })

        if self.debug:
            logger.debug("readability raw=%.2f normalized=%.3f", ease, normalized)

        return ScorerResult(raw_score=ease, normalized_score=self.clamp(normalized), metrics=metrics)
