#!/usr/bin/env python
"""CLI for the deep research pipeline."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import BaseModel, ValidationError, field_validator

from deep_research.config import create_from_config, get_default_config_path, load_config
from deep_research.data import ResearchResult

logger = logging.getLogger(__name__)


class CLIArgs(BaseModel):
    """Validated CLI arguments.

    ``log`` and ``log_dir`` only override the config file when set.
    """

    question: str
    config: Path
    log: bool = False
    log_dir: str | None = None
    verbose: bool = False

    @field_validator("question")
    @classmethod
    def question_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Question must not be empty")
        return v.strip()

    @field_validator("config")
    @classmethod
    def config_must_exist(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"Config file not found: {v}")
        return v


def print_result(result: ResearchResult) -> None:
    """Print the answer with numbered sources; run statistics go to the log."""
    print(f"\n{result.response}\n")

    if result.sources:
        print("--- Sources ---")
        for i, source in enumerate(result.sources, 1):
            print(f"[{i}] {source.title or source.domain} - {source.url}")

    if result.follow_up_questions:
        print("\n--- Follow-up questions ---")
        for question in result.follow_up_questions:
            print(f"- {question}")

    stats = result.stats
    logger.info("\n--- Research Summary ---")
    logger.info(f"Confidence: {result.confidence}")
    logger.info(
        f"Searches: {stats.total_searches}, pages: {stats.pages_analyzed}, "
        f"facts: {stats.facts_extracted} extracted / {stats.facts_verified} verified"
    )
    for phase in stats.phases:
        logger.info(f"  {phase.name}: {phase.duration_ms:.0f}ms ({phase.items_processed} items)")
    logger.info(f"Total time: {stats.total_time_ms / 1000:.1f}s")


async def run(args: CLIArgs) -> None:
    config = load_config(args.config)
    engine, browser, run_logger = create_from_config(
        config,
        log_override=True if args.log else None,
        log_dir_override=args.log_dir,
    )

    logger.info(f"Researching: {args.question}")
    logger.debug(f"Config: {args.config}")

    async with browser:
        result = await engine.research(args.question)
    print_result(result)

    if run_logger and run_logger.last_log_path:
        logger.info(f"\nRun log written to: {run_logger.last_log_path}")


def parse_args(argv: list[str] | None = None) -> CLIArgs:
    """Parse and validate command-line arguments.

    Raises:
        ValidationError: If the question is blank or the config file is missing.
    """
    parser = argparse.ArgumentParser(
        description="Answer a question with a cited report built from live web sources."
    )
    parser.add_argument("question", help="Question to research")
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML config file (default: configs/default.yaml)",
    )
    parser.add_argument(
        "--log",
        action="store_true",
        help="Write every phase's input and output to a JSON run log",
    )
    parser.add_argument("--log-dir", default=None, help="Directory for run logs")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    ns = parser.parse_args(argv)
    return CLIArgs(
        question=ns.question,
        config=ns.config or get_default_config_path(),
        log=ns.log,
        log_dir=ns.log_dir,
        verbose=ns.verbose,
    )


def main() -> None:
    """Entry point for the CLI."""
    try:
        args = parse_args()
    except ValidationError as e:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
        for error in e.errors():
            logger.error(error["msg"])
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
