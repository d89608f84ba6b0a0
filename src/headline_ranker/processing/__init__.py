"""Processing package for headline deduplication, scoring, and ranking."""

from .tokenizer import significant_words, extract_keywords
from .similarity import jaccard, overlap, are_similar, is_final_duplicate
from .deduplicator import Deduplicator, canonical_url
from .scorer import RelevanceScorer, CandidateIndex
from .ranker import Ranker

__all__ = [
    'significant_words',
    'extract_keywords',
    'jaccard',
    'overlap',
    'are_similar',
    'is_final_duplicate',
    'Deduplicator',
    'canonical_url',
    'RelevanceScorer',
    'CandidateIndex',
    'Ranker',
]
