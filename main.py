#!/usr/bin/env python
"""CLI for the worldwire event pipeline."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import BaseModel, field_validator

from worldwire.config import create_from_config, get_default_config_path, load_config
from worldwire.data import (
    DateUnit,
    MaintenanceMode,
    MaintenanceUnit,
    RunSummary,
    TopicSweepUnit,
    UnitOfWork,
)

logger = logging.getLogger(__name__)


class CLIArgs(BaseModel):
    """Validated CLI arguments."""

    command: str
    targets: list[str] = []
    limit: int = 50
    config: Path
    log: bool = False
    log_dir: str = "logs"

    @field_validator("config")
    @classmethod
    def config_must_exist(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"Config file not found: {v}")
        return v

    def units(self) -> list[UnitOfWork]:
        """Translate the arguments into units of work.

        Raises:
            ValueError: If a date or maintenance mode is invalid.
        """
        if self.command == "date":
            units: list[UnitOfWork] = []
            for target in self.targets:
                month, sep, day = target.partition("-")
                if not sep or not month.isdigit() or not day.isdigit():
                    raise ValueError(f"Dates must look like MM-DD, got {target!r}")
                units.append(DateUnit(month=int(month), day=int(day)))
            return units
        if self.command == "topic":
            return [TopicSweepUnit(topics=tuple(self.targets) or ("",))]
        if self.command == "maintain":
            return [MaintenanceUnit(mode=MaintenanceMode(self.targets[0]), limit=self.limit)]
        raise ValueError(f"Unknown command: {self.command}")


def print_summary(summary: RunSummary) -> None:
    print(f"\n{summary.unit}: {summary.state}")
    print(
        f"  processed={summary.processed} created={summary.created} "
        f"updated={summary.updated} skipped={summary.skipped} "
        f"rejected={summary.rejected} errors={summary.errors}"
    )
    print(
        f"  articles={summary.articles_collected} groups={summary.groups_formed} "
        f"duration={summary.duration_seconds:.1f}s"
    )
    if summary.timed_out:
        print("  run timed out; remaining work was skipped")
    if summary.error:
        print(f"  error: {summary.error}")


async def run(args: CLIArgs) -> RunSummary:
    """Execute the pipeline with the given configuration.

    Args:
        args: Validated CLI arguments.

    Returns:
        Merged summary of every unit.
    """
    config = load_config(args.config)
    orchestrator, run_logger = create_from_config(
        config,
        log_override=args.log if args.log else None,
        log_dir_override=args.log_dir if args.log_dir != "logs" else None,
    )
    units = args.units()

    logger.info(f"Running {len(units)} unit(s): {', '.join(u.label for u in units)}")
    logger.info(f"Config: {args.config}")

    if len(units) == 1:
        summary = await orchestrator.run_pipeline(units[0])
    else:
        summary = await orchestrator.run_sweep(units)

    print_summary(summary)
    logger.info("\n--- Usage Summary ---")
    logger.info(f"Provider requests: {summary.usage.provider_requests}")
    logger.info(f"API calls: {len(summary.usage.api_calls)}")
    logger.info(f"Input tokens: {summary.usage.input_tokens:,}")
    logger.info(f"Output tokens: {summary.usage.output_tokens:,}")

    if run_logger and run_logger.last_log_path:
        logger.info(f"\nRun log written to: {run_logger.last_log_path}")
    return summary


def main() -> None:
    """Entry point for the CLI."""
    parser = argparse.ArgumentParser(description="Collect, score and store world events.")
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
        default=False,
        help="Enable intermediate pipeline logging to JSON file",
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default="logs",
        help="Directory for log files (default: logs/)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    date_parser = subparsers.add_parser("date", help="Process events for calendar dates")
    date_parser.add_argument("targets", nargs="+", metavar="MM-DD", help="Dates such as 05-01")

    topic_parser = subparsers.add_parser("topic", help="Sweep news topics")
    topic_parser.add_argument(
        "targets",
        nargs="*",
        metavar="TOPIC",
        help="Topics to sweep (none: top headlines)",
    )

    maintain_parser = subparsers.add_parser("maintain", help="Maintain stored records")
    maintain_parser.add_argument(
        "targets",
        nargs=1,
        choices=[m.value for m in MaintenanceMode],
        metavar="MODE",
        help="rescore, reenrich or bias",
    )
    maintain_parser.add_argument(
        "--limit",
        type=int,
        default=50,
        help="Maximum number of records to process (default: 50)",
    )

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    ns = parser.parse_args()
    config_path: Path = ns.config if ns.config else get_default_config_path()

    try:
        args = CLIArgs(
            command=ns.command,
            targets=ns.targets,
            limit=getattr(ns, "limit", 50),
            config=config_path,
            log=ns.log,
            log_dir=ns.log_dir,
        )
        args.units()
    except Exception as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        summary = asyncio.run(run(args))
    except KeyboardInterrupt:
        sys.exit(130)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    if not summary.succeeded:
        sys.exit(1)


if __name__ == "__main__":
    main()
