"""Configuration management for the Headline Ranker."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import yaml
from dotenv import load_dotenv

from .models import SOURCE_TYPES, SourceDescriptor


# Source type names accepted in config files, mapped to the canonical names
SOURCE_TYPE_ALIASES = {
    'feed': 'feed',
    'rss': 'feed',
    'page': 'page',
    'http': 'page',
    'social-list': 'social-list',
    'reddit': 'social-list',
}


# Finance feeds used by the market pipeline when the config has no market_feeds section
DEFAULT_MARKET_FEEDS = [
    ("Yahoo Finance", "https://finance.yahoo.com/news/rssindex", "usa"),
    ("CNBC", "https://www.cnbc.com/id/10001147/device/rss/rss.html", "usa"),
    ("MarketWatch", "https://feeds.marketwatch.com/marketwatch/topstories", "usa"),
    ("Seeking Alpha", "https://seekingalpha.com/market_currents.xml", "usa"),
    ("InfoMoney", "https://www.infomoney.com.br/feed/", "brasil"),
    ("InvestNews", "https://investnews.com.br/feed/", "brasil"),
    ("Valor Econômico", "https://valor.globo.com/rss/valor/", "economia"),
]


def default_market_feeds() -> List[SourceDescriptor]:
    return [
        SourceDescriptor(name=name, url=url, type="feed", category=category)
        for name, url, category in DEFAULT_MARKET_FEEDS
    ]


@dataclass
class PipelineConfig:
    """Limits for the ranking pipelines."""
    max_news_per_send: int = 10
    news_max_age_hours: int = 24
    check_interval_minutes: int = 30
    latest_max_age_hours: int = 1
    latest_max_items: int = 15
    top_of_day_count: int = 5
    max_per_source: int = 3
    market_max_items: int = 10
    market_max_age_hours: int = 24


@dataclass
class TimeoutConfig:
    """Wall-clock budgets for pipeline stages, in seconds."""
    fetch_seconds: float = 60.0
    enrichment_seconds: float = 90.0


@dataclass
class SocialConfig:
    """Configuration for social signal enrichment."""
    enabled: bool = True
    top_candidates: int = 20
    batch_size: int = 5
    batch_delay_seconds: float = 0.4
    request_timeout: float = 10.0
    user_agent: str = "HeadlineRanker/1.0"


@dataclass
class Config:
    """Main application configuration."""
    feeds: List[SourceDescriptor]
    market_feeds: List[SourceDescriptor] = field(default_factory=default_market_feeds)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    social: SocialConfig = field(default_factory=SocialConfig)
    retention_hours: int = 48
    delivered_state_file: Path = field(default_factory=lambda: Path("data/delivered.json"))
    log_file: Path = field(default_factory=lambda: Path("logs/headline_ranker.log"))


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""
    pass


def _env_int(key: str, fallback: int) -> int:
    """Integer from the environment, or ``fallback`` if unset or not a number."""
    value = os.getenv(key)
    if not value:
        return fallback
    try:
        return int(value)
    except ValueError:
        return fallback


def _parse_source(entry, position: int) -> SourceDescriptor:
    """Build a SourceDescriptor from one ``feeds`` entry."""
    if not isinstance(entry, dict):
        raise ConfigError(f"Feed #{position} must be a mapping")

    name = entry.get('name')
    url = entry.get('url')
    if not name or not url:
        raise ConfigError(f"Feed #{position} is missing 'name' or 'url'")

    raw_type = str(entry.get('type', 'feed')).lower()
    source_type = SOURCE_TYPE_ALIASES.get(raw_type)
    if source_type is None:
        raise ConfigError(
            f"Feed '{name}' has unknown type '{raw_type}'. "
            f"Must be one of: {', '.join(SOURCE_TYPES)}"
        )

    return SourceDescriptor(
        name=str(name),
        url=str(url),
        type=source_type,
        category=str(entry.get('category', 'general')),
        enabled=bool(entry.get('enabled', True))
    )


def load_config(config_path: str = "config/config.yaml") -> Config:
    """
    Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to the configuration YAML file

    Returns:
        Config object with all settings

    Raises:
        ConfigError: If configuration is invalid or missing required fields
    """
    load_dotenv("config/.env")
    load_dotenv()

    if not os.path.exists(config_path):
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            yaml_config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to parse YAML configuration: {e}")

    if not yaml_config:
        raise ConfigError("Configuration file is empty")
    if not isinstance(yaml_config, dict):
        raise ConfigError("Configuration file must contain a mapping")

    feeds_config = yaml_config.get('feeds')
    if not feeds_config or not isinstance(feeds_config, list):
        raise ConfigError("Missing required configuration section: feeds")

    feeds = [_parse_source(entry, i + 1) for i, entry in enumerate(feeds_config)]

    market_config = yaml_config.get('market_feeds')
    if market_config is None:
        market_feeds = default_market_feeds()
    elif isinstance(market_config, list):
        market_feeds = [_parse_source(entry, i + 1) for i, entry in enumerate(market_config)]
    else:
        raise ConfigError("'market_feeds' must be a list of sources")

    pipeline_data = yaml_config.get('pipeline', {}) or {}
    timeouts_data = yaml_config.get('timeouts', {}) or {}
    social_data = yaml_config.get('social', {}) or {}
    paths_data = yaml_config.get('paths', {}) or {}

    try:
        pipeline = PipelineConfig(
            max_news_per_send=_env_int(
                'MAX_NEWS_PER_SEND', int(pipeline_data.get('max_news_per_send', 10))),
            news_max_age_hours=_env_int(
                'NEWS_MAX_AGE_HOURS', int(pipeline_data.get('news_max_age_hours', 24))),
            check_interval_minutes=_env_int(
                'CHECK_INTERVAL_MINUTES', int(pipeline_data.get('check_interval_minutes', 30))),
            latest_max_age_hours=int(pipeline_data.get('latest_max_age_hours', 1)),
            latest_max_items=int(pipeline_data.get('latest_max_items', 15)),
            top_of_day_count=int(pipeline_data.get('top_of_day_count', 5)),
            max_per_source=int(pipeline_data.get('max_per_source', 3)),
            market_max_items=int(pipeline_data.get('market_max_items', 10)),
            market_max_age_hours=int(pipeline_data.get('market_max_age_hours', 24))
        )

        timeouts = TimeoutConfig(
            fetch_seconds=float(timeouts_data.get('fetch_seconds', 60.0)),
            enrichment_seconds=float(timeouts_data.get('enrichment_seconds', 90.0))
        )

        social = SocialConfig(
            enabled=bool(social_data.get('enabled', True)),
            top_candidates=int(social_data.get('top_candidates', 20)),
            batch_size=int(social_data.get('batch_size', 5)),
            batch_delay_seconds=float(social_data.get('batch_delay_seconds', 0.4)),
            request_timeout=float(social_data.get('request_timeout', 10.0)),
            user_agent=str(social_data.get('user_agent', 'HeadlineRanker/1.0'))
        )

        retention_hours = int(yaml_config.get('retention_hours', 48))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid numeric setting: {e}")

    delivered_state_file = (
        os.getenv('DELIVERED_STATE_FILE')
        or paths_data.get('delivered_state_file', 'data/delivered.json')
    )

    return Config(
        feeds=feeds,
        market_feeds=market_feeds,
        pipeline=pipeline,
        timeouts=timeouts,
        social=social,
        retention_hours=retention_hours,
        delivered_state_file=Path(delivered_state_file),
        log_file=Path(paths_data.get('log_file', 'logs/headline_ranker.log'))
    )


def validate_config(config: Config) -> None:
    """
    Validate configuration object.

    Args:
        config: Configuration object to validate

    Raises:
        ConfigError: If configuration is invalid
    """
    if not any(source.enabled for source in config.feeds):
        raise ConfigError("No enabled feeds configured")

    positive = {
        'pipeline.max_news_per_send': config.pipeline.max_news_per_send,
        'pipeline.news_max_age_hours': config.pipeline.news_max_age_hours,
        'pipeline.check_interval_minutes': config.pipeline.check_interval_minutes,
        'pipeline.latest_max_age_hours': config.pipeline.latest_max_age_hours,
        'pipeline.latest_max_items': config.pipeline.latest_max_items,
        'pipeline.top_of_day_count': config.pipeline.top_of_day_count,
        'pipeline.max_per_source': config.pipeline.max_per_source,
        'pipeline.market_max_items': config.pipeline.market_max_items,
        'pipeline.market_max_age_hours': config.pipeline.market_max_age_hours,
        'timeouts.fetch_seconds': config.timeouts.fetch_seconds,
        'timeouts.enrichment_seconds': config.timeouts.enrichment_seconds,
        'social.batch_size': config.social.batch_size,
        'retention_hours': config.retention_hours,
    }
    for name, value in positive.items():
        if value <= 0:
            raise ConfigError(f"Invalid {name}: {value}. Must be greater than 0.")

    if config.social.top_candidates < 0:
        raise ConfigError(f"Invalid social.top_candidates: {config.social.top_candidates}")
    if config.social.batch_delay_seconds < 0:
        raise ConfigError(f"Invalid social.batch_delay_seconds: {config.social.batch_delay_seconds}")

    for section, sources in (('feeds', config.feeds), ('market_feeds', config.market_feeds)):
        names = [source.name for source in sources]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            label = "feed" if section == 'feeds' else "market feed"
            raise ConfigError(f"Duplicate {label} names: {', '.join(duplicates)}")

    for path in [config.delivered_state_file.parent, config.log_file.parent]:
        if not path.exists():
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ConfigError(f"Failed to create directory {path}: {e}")
