"""Title normalization and significant-keyword extraction."""

import re
from typing import List, Optional, Set


# Quote and dash variants are turned into word breaks before the alphabet filter
_QUOTES_AND_DASHES = re.compile(r"['\"‘’“”\-–—]")
_OUTSIDE_ALPHABET = re.compile(r"[^a-záàâãéèêíïóôõöúçñ0-9\s]")
_WHITESPACE = re.compile(r"\s+")

MIN_TOKEN_LENGTH = 3

# Function words ignored when comparing titles for duplicates
DEDUP_STOP_WORDS = frozenset([
    # English
    'a', 'an', 'the', 'is', 'are', 'was', 'were', 'be', 'been', 'to', 'of',
    'in', 'for', 'on', 'with', 'at', 'by', 'from', 'as', 'and', 'but', 'or',
    'it', 'its', 'this', 'that', 'has', 'have', 'had', 'will', 'not', 'no',
    'can', 'do', 'does', 'did', 'says', 'said', 'new', 'how', 'what', 'why',
    'who', 'when', 'where', 'after', 'over', 'up', 'out', 'into', 'about',
    # Portuguese
    'de', 'da', 'do', 'dos', 'das', 'em', 'no', 'na', 'nos', 'nas',
    'um', 'uma', 'por', 'para', 'com', 'sem', 'que', 'se', 'mais', 'mas',
    'seu', 'sua', 'foi', 'ser', 'ter', 'diz', 'são', 'tem', 'vai',
    'sobre', 'entre', 'como', 'já', 'até', 'não', 'há', 'os', 'as',
])

# Broader list used for relevance keywords (trending and cross-feed)
KEYWORD_STOP_WORDS = DEDUP_STOP_WORDS | frozenset([
    # English
    'being', 'would', 'could', 'should', 'may', 'might', 'shall', 'need',
    'dare', 'ought', 'used', 'through', 'during', 'before', 'above', 'below',
    'between', 'off', 'under', 'again', 'further', 'then', 'once', 'nor',
    'so', 'yet', 'both', 'either', 'neither', 'each', 'every', 'all', 'any',
    'few', 'more', 'most', 'other', 'some', 'such', 'only', 'own', 'same',
    'than', 'too', 'very', 'just', 'because', 'these', 'those', 'he', 'she',
    'they', 'we', 'you', 'i', 'me', 'my', 'your', 'his', 'her', 'their',
    'our', 'which', 'if', 'while',
    # Portuguese
    'uns', 'umas', 'sob', 'seus', 'suas', 'ele', 'ela', 'eles', 'elas',
    'isso', 'isto', 'aquilo', 'este', 'esta', 'esse', 'essa', 'ainda',
    'também', 'está', 'pode', 'após', 'ano', 'dia', 'vez',
])


def normalize_text(text: Optional[str]) -> str:
    """
    Lowercase and strip everything outside the keyword alphabet.

    Args:
        text: Raw title or description

    Returns:
        Normalized text with single spaces between words
    """
    if not isinstance(text, str):
        return ""

    text = text.lower()
    text = _QUOTES_AND_DASHES.sub(' ', text)
    text = _OUTSIDE_ALPHABET.sub(' ', text)
    text = _WHITESPACE.sub(' ', text)
    return text.strip()


def significant_words(text: Optional[str], stop_words: Set[str] = DEDUP_STOP_WORDS) -> List[str]:
    """
    Extract significant keywords from a title, in input order.

    Tokens of two characters or fewer and stop words are dropped.
    Duplicates are kept; callers that need a set must build one.

    Args:
        text: Title (or title plus description)
        stop_words: Stop-word list to filter against

    Returns:
        List of keywords, possibly empty
    """
    normalized = normalize_text(text)
    if not normalized:
        return []

    return [
        token for token in normalized.split(' ')
        if len(token) >= MIN_TOKEN_LENGTH and token not in stop_words
    ]


def extract_keywords(text: Optional[str]) -> List[str]:
    """Significant keywords using the broader relevance stop-word list."""
    return significant_words(text, stop_words=KEYWORD_STOP_WORDS)
