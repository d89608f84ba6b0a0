"""Headline Ranker: deduplicate, score and select news headlines from many sources."""

__version__ = "1.0.0"
