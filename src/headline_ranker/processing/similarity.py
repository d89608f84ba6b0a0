"""Lexical similarity between headline keyword sets."""

from typing import Iterable

from .tokenizer import normalize_text, significant_words


# Early pass, used when ranking
SHORT_TITLE_WORDS = 2
SHORT_TITLE_JACCARD = 0.6
JACCARD_THRESHOLD = 0.35
OVERLAP_THRESHOLD = 0.65
COMBINED_JACCARD = 0.25
COMBINED_OVERLAP = 0.5

# Final pass, applied just before delivery
FINAL_JACCARD_THRESHOLD = 0.3
FINAL_OVERLAP_THRESHOLD = 0.6
FINAL_COMBINED_JACCARD = 0.2
FINAL_COMBINED_OVERLAP = 0.45


def jaccard(words_a: Iterable[str], words_b: Iterable[str]) -> float:
    """
    Jaccard similarity |A∩B| / |A∪B| of two keyword collections.

    Returns 0.0 when either side is empty.
    """
    set_a = set(words_a)
    set_b = set(words_b)
    if not set_a or not set_b:
        return 0.0
    return len(set_a & set_b) / len(set_a | set_b)


def overlap(words_a: Iterable[str], words_b: Iterable[str]) -> float:
    """
    Overlap coefficient |A∩B| / min(|A|, |B|) of two keyword collections.

    Scores a short headline fully contained in a longer one as 1.0.
    Returns 0.0 when either side is empty.
    """
    set_a = set(words_a)
    set_b = set(words_b)
    if not set_a or not set_b:
        return 0.0
    return len(set_a & set_b) / min(len(set_a), len(set_b))


def words_similar(words_a: list, words_b: list) -> bool:
    """Early-pass duplicate decision on pre-extracted keyword sequences."""
    j = jaccard(words_a, words_b)

    # Short titles match too easily; only near-identical ones count
    if len(words_a) <= SHORT_TITLE_WORDS or len(words_b) <= SHORT_TITLE_WORDS:
        return j >= SHORT_TITLE_JACCARD

    o = overlap(words_a, words_b)
    return (
        j >= JACCARD_THRESHOLD
        or o >= OVERLAP_THRESHOLD
        or (j >= COMBINED_JACCARD and o >= COMBINED_OVERLAP)
    )


def are_similar(title_a: str, title_b: str) -> bool:
    """
    Decide whether two headlines cover the same story.

    Args:
        title_a: First headline
        title_b: Second headline

    Returns:
        True if the titles should be treated as duplicates
    """
    if normalize_text(title_a) == normalize_text(title_b):
        return True

    return words_similar(significant_words(title_a), significant_words(title_b))


def is_final_duplicate(words_a: Iterable[str], words_b: Iterable[str]) -> bool:
    """Final-pass duplicate decision, looser than ``are_similar``."""
    set_a = set(words_a)
    set_b = set(words_b)
    j = jaccard(set_a, set_b)
    o = overlap(set_a, set_b)
    return (
        j >= FINAL_JACCARD_THRESHOLD
        or o >= FINAL_OVERLAP_THRESHOLD
        or (j >= FINAL_COMBINED_JACCARD and o >= FINAL_COMBINED_OVERLAP)
    )
