#!/usr/bin/env python3
"""review-reminder CLI entrypoint."""

import argparse
import asyncio
import logging
import sys

from reviewreminder.config import Config
from reviewreminder.exceptions import ConfigurationError
from reviewreminder.gitlab import AsyncGitLabClient
from reviewreminder.logging import configure_logging
from reviewreminder.messenger import DryRunMessenger, WebhookMessenger
from reviewreminder.pipeline import MessagePipeline


async def run(config: Config, dry_run: bool = False) -> int:
    """Open the collaborators for one run and perform it."""
    messenger = DryRunMessenger() if dry_run else WebhookMessenger.from_config(config)
    async with AsyncGitLabClient.from_config(config) as gitlab, messenger:
        return await MessagePipeline(config, gitlab, messenger).perform()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="review-reminder",
        description="Remind reviewers about merge requests waiting for them",
    )
    parser.add_argument("--config", "-c", help="Path to the JSON config (default: $REVIEW_REMINDER_CONFIG or config.json)")
    parser.add_argument("--dry-run", action="store_true", help="Log messages instead of sending them")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every GitLab request")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    configure_logging(
        level=logging.INFO,
        http_level=logging.DEBUG if args.verbose else logging.WARNING,
    )

    try:
        config = Config.from_env(args.config)
        return asyncio.run(run(config, dry_run=args.dry_run))
    except ConfigurationError as err:
        print(f"ERROR: {err}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
