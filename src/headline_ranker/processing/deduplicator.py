"""Deduplication component for collapsing repeated coverage of a story."""

import re
from typing import List, Set

from ..models import Document
from ..logger import get_logger
from .similarity import are_similar, is_final_duplicate
from .tokenizer import significant_words


_TRAILING_SLASHES = re.compile(r"/+$")


def canonical_url(url: str) -> str:
    """
    Canonical form of a link used for delivery bookkeeping.

    Trailing slashes are stripped and the result is lowercased.
    """
    return _TRAILING_SLASHES.sub('', url or '').lower()


class Deduplicator:
    """Removes near-duplicate headlines and repeated links."""

    def __init__(self):
        self.logger = get_logger()

    def deduplicate_by_similarity(self, documents: List[Document]) -> List[Document]:
        """
        Keep the best-scored representative of each story.

        Documents are visited in descending relevance order and each one is
        compared with every representative kept so far, so the first
        (highest-scored) member of a cluster wins.

        Args:
            documents: Candidate documents

        Returns:
            Representatives in descending relevance order
        """
        if not documents:
            return []

        ordered = sorted(documents, key=lambda d: d.relevance_score, reverse=True)
        kept: List[Document] = []

        for document in ordered:
            duplicate_of = next(
                (rep for rep in kept if are_similar(document.title, rep.title)),
                None
            )
            if duplicate_of is None:
                kept.append(document)
            else:
                self.logger.debug(
                    f"Skipping duplicate '{document.title}' ({document.source}) "
                    f"of '{duplicate_of.title}' ({duplicate_of.source})"
                )

        self.logger.info(f"Similarity dedup: {len(documents)} -> {len(kept)} documents")
        return kept

    def final_dedup(self, documents: List[Document]) -> List[Document]:
        """
        Last duplicate filter before delivery.

        Uses looser thresholds than ``deduplicate_by_similarity`` and keeps
        the input order, since the list is already ranked.

        Args:
            documents: Ranked documents

        Returns:
            Documents without duplicates, in input order
        """
        kept: List[Document] = []
        kept_words: List[List[str]] = []

        for document in documents:
            words = significant_words(document.title)
            if any(is_final_duplicate(words, existing) for existing in kept_words):
                self.logger.debug(f"Final dedup dropped '{document.title}'")
                continue
            kept.append(document)
            kept_words.append(words)

        if len(kept) != len(documents):
            self.logger.info(f"Final dedup: {len(documents)} -> {len(kept)} documents")
        return kept

    def deduplicate_by_url(self, documents: List[Document]) -> List[Document]:
        """
        Remove documents whose canonical link was already seen.

        Args:
            documents: List of documents

        Returns:
            List with unique links only, first occurrence kept
        """
        seen_urls: Set[str] = set()
        unique_documents = []

        for document in documents:
            url = canonical_url(document.link)
            if url not in seen_urls:
                seen_urls.add(url)
                unique_documents.append(document)

        return unique_documents
