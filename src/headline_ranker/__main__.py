"""Command-line entry point: ``python -m headline_ranker``."""

import argparse
import asyncio
import json
import logging
import sys

from .config import ConfigError, load_config, validate_config
from .logger import setup_logger
from .orchestrator import PipelineOrchestrator
from .scheduler import Scheduler


def _print_documents(result, documents) -> None:
    output = {
        'result': result.to_dict(),
        'documents': [document.to_dict() for document in documents],
    }
    json.dump(output, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="headline_ranker", description="Headline ranking pipeline")
    parser.add_argument("command", choices=["trending", "latest", "top", "market", "schedule"],
                        help="Pipeline to run")
    parser.add_argument("--config", default="config/config.yaml", help="Path to YAML config")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        validate_config(config)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logger(config.log_file, level=logging.DEBUG if args.verbose else logging.INFO)
    orchestrator = PipelineOrchestrator(config)

    if args.command == "schedule":
        scheduler = Scheduler(orchestrator, interval_minutes=config.pipeline.check_interval_minutes)
        try:
            asyncio.run(scheduler.run_forever())
        except KeyboardInterrupt:
            pass
        return 0

    runners = {
        "trending": orchestrator.run_trending,
        "latest": orchestrator.run_latest,
        "top": orchestrator.top_of_day,
        "market": orchestrator.run_market,
    }
    result, documents = asyncio.run(runners[args.command]())
    _print_documents(result, documents)
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
