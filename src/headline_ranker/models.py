"""Data models for the Headline Ranker."""

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import List, Optional


SOURCE_TYPES = ("feed", "page", "social-list")


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class ScoreBreakdown:
    """Relevance sub-scores for a single document.

    The total is always derived from the four sub-scores.
    """
    cross_feed: int = 0
    trending: int = 0
    recency: int = 0
    social: int = 0

    @property
    def total(self) -> int:
        return self.cross_feed + self.trending + self.recency + self.social

    def to_dict(self) -> dict:
        """Convert breakdown to dictionary for JSON serialization."""
        data = asdict(self)
        data['total'] = self.total
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'ScoreBreakdown':
        """Create ScoreBreakdown from dictionary (derived total is ignored)."""
        return cls(
            cross_feed=int(data.get('cross_feed', 0)),
            trending=int(data.get('trending', 0)),
            recency=int(data.get('recency', 0)),
            social=int(data.get('social', 0))
        )


@dataclass(frozen=True, eq=False)
class Document:
    """A fetched headline. Identity fields never change after creation."""
    title: str
    link: str
    source: str
    published_at: datetime
    description: str = ""
    score: ScoreBreakdown = field(default_factory=ScoreBreakdown)

    def __post_init__(self):
        object.__setattr__(self, 'published_at', ensure_utc(self.published_at))

    def __hash__(self):
        return hash(self.link)

    def __eq__(self, other):
        if not isinstance(other, Document):
            return False
        return self.link == other.link

    @property
    def relevance_score(self) -> int:
        return self.score.total

    def age_hours(self, now: Optional[datetime] = None) -> float:
        """Age of the document in hours relative to ``now``."""
        now = ensure_utc(now) if now is not None else utcnow()
        return (now - self.published_at).total_seconds() / 3600.0

    def to_dict(self) -> dict:
        """Convert document to dictionary for JSON serialization."""
        return {
            'title': self.title,
            'link': self.link,
            'source': self.source,
            'published_at': self.published_at.isoformat(),
            'description': self.description,
            'relevance_score': self.relevance_score,
            'score': self.score.to_dict()
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Document':
        """Create Document from dictionary."""
        published_at = data['published_at']
        if isinstance(published_at, str):
            published_at = datetime.fromisoformat(published_at)
        return cls(
            title=data['title'],
            link=data['link'],
            source=data['source'],
            published_at=published_at,
            description=data.get('description', ''),
            score=ScoreBreakdown.from_dict(data.get('score', {}))
        )


@dataclass
class SourceDescriptor:
    """A configured news source."""
    name: str
    url: str
    type: str = "feed"  # "feed", "page" or "social-list"
    category: str = "general"
    enabled: bool = True


@dataclass
class SocialSignal:
    """Best engagement candidate reported by one social provider."""
    score: int = 0
    comments: int = 0

    @property
    def weight(self) -> int:
        return self.score + 2 * self.comments


@dataclass
class DeliveredRecord:
    """Persisted record of canonical URLs already shown to the consumer."""
    urls: List[str] = field(default_factory=list)
    timestamp: int = 0  # epoch milliseconds

    def to_dict(self) -> dict:
        """Convert record to dictionary for JSON serialization."""
        return {'urls': list(self.urls), 'timestamp': self.timestamp}

    @classmethod
    def from_dict(cls, data: dict) -> 'DeliveredRecord':
        """Create DeliveredRecord from dictionary."""
        urls = data.get('urls', [])
        if not isinstance(urls, list):
            raise ValueError("'urls' must be a list")
        return cls(urls=[str(url) for url in urls], timestamp=int(data.get('timestamp', 0)))


@dataclass
class ExecutionResult:
    """Results from a pipeline execution."""
    success: bool
    pipeline: str
    documents_fetched: int
    documents_delivered: int
    errors: List[str] = field(default_factory=list)
    execution_time: float = 0.0
    timestamp: datetime = field(default_factory=utcnow)
    timed_out_stage: Optional[str] = None  # set when a stage budget aborted the run

    def to_dict(self) -> dict:
        """Convert execution result to dictionary for JSON serialization."""
        data = asdict(self)
        data['timestamp'] = self.timestamp.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'ExecutionResult':
        """Create ExecutionResult from dictionary."""
        data = data.copy()
        if isinstance(data['timestamp'], str):
            data['timestamp'] = datetime.fromisoformat(data['timestamp'])
        return cls(**data)
