"""Unit tests for headline deduplication."""

from datetime import datetime, timedelta, timezone

from headline_ranker.models import Document, ScoreBreakdown
from headline_ranker.processing.deduplicator import Deduplicator, canonical_url


NOW = datetime(2025, 1, 6, 12, 0, tzinfo=timezone.utc)

FED_TITLES = [
    "Fed raises interest rates by quarter point",
    "Fed raises interest rates a quarter point",
    "Federal Reserve raises interest rates quarter point",
]
UNRELATED = "Heavy snowstorm closes schools across Colorado"


def make_document(title, source="Source A", score=0, link=None):
    return Document(
        title=title,
        link=link or f"https://{source.lower().replace(' ', '-')}.example.com/{title.lower().replace(' ', '-')}",
        source=source,
        published_at=NOW - timedelta(hours=1),
        score=ScoreBreakdown(cross_feed=score)
    )


class TestDeduplicateBySimilarity:
    """Test the early-pass, score-ordered deduplication."""

    def test_keeps_highest_scored_representative(self):
        documents = [
            make_document(FED_TITLES[0], "Source A", score=10),
            make_document(FED_TITLES[1], "Source B", score=50),
            make_document(UNRELATED, "Source C", score=5),
            make_document(FED_TITLES[2], "Source D", score=30),
        ]

        result = Deduplicator().deduplicate_by_similarity(documents)

        assert [d.source for d in result] == ["Source B", "Source C"]

    def test_result_sorted_by_score(self):
        documents = [
            make_document(UNRELATED, "Source C", score=5),
            make_document(FED_TITLES[0], "Source A", score=40),
        ]

        result = Deduplicator().deduplicate_by_similarity(documents)

        assert [d.relevance_score for d in result] == [40, 5]

    def test_equal_scores_keep_first_seen(self):
        documents = [
            make_document(FED_TITLES[0], "Source A", score=10),
            make_document(FED_TITLES[2], "Source B", score=10),
        ]

        result = Deduplicator().deduplicate_by_similarity(documents)

        assert [d.source for d in result] == ["Source A"]

    def test_idempotent(self):
        documents = [
            make_document(FED_TITLES[0], "Source A", score=10),
            make_document(FED_TITLES[1], "Source B", score=50),
            make_document(UNRELATED, "Source C", score=5),
            make_document("Trump tariffs", "Source D", score=7),
            make_document("Trump announces new tariffs on China imports", "Source E", score=9),
        ]
        dedup = Deduplicator()

        once = dedup.deduplicate_by_similarity(documents)
        twice = dedup.deduplicate_by_similarity(once)

        assert twice == once

    def test_empty(self):
        assert Deduplicator().deduplicate_by_similarity([]) == []


class TestFinalDedup:
    """Test the order-preserving final pass."""

    def test_preserves_input_order(self):
        documents = [
            make_document(UNRELATED, "Source C", score=1),
            make_document(FED_TITLES[0], "Source A", score=5),
            make_document(FED_TITLES[1], "Source B", score=50),
        ]

        result = Deduplicator().final_dedup(documents)

        assert [d.source for d in result] == ["Source C", "Source A"]

    def test_catches_contained_short_title(self):
        """The final pass merges a short headline contained in a longer one."""
        documents = [
            make_document("Trump announces new tariffs on China imports", "Source A"),
            make_document("Trump tariffs", "Source B"),
        ]

        result = Deduplicator().final_dedup(documents)

        assert len(result) == 1
        assert result[0].source == "Source A"

    def test_idempotent(self):
        documents = [
            make_document(FED_TITLES[0], "Source A"),
            make_document("Nvidia stock record surge", "Source B"),
            make_document("Nvidia stock falls amid chip export worries", "Source C"),
            make_document(UNRELATED, "Source D"),
        ]
        dedup = Deduplicator()

        once = dedup.final_dedup(documents)

        assert dedup.final_dedup(once) == once
        assert len(once) == 3

    def test_empty(self):
        assert Deduplicator().final_dedup([]) == []


class TestDeduplicateByUrl:
    """Test link-based deduplication."""

    def test_canonical_url(self):
        assert canonical_url("HTTPS://Example.com/Story///") == "https://example.com/story"
        assert canonical_url("") == ""

    def test_first_occurrence_kept(self):
        documents = [
            make_document("First", "Source A", link="https://example.com/story/"),
            make_document("Second", "Source B", link="HTTPS://EXAMPLE.com/story"),
            make_document("Third", "Source C", link="https://example.com/other"),
        ]

        result = Deduplicator().deduplicate_by_url(documents)

        assert [d.title for d in result] == ["First", "Third"]
