"""Command line entry point."""

from __future__ import annotations

import argparse
import logging
import sys

from .config import DEFAULT_WORKERS, DeleterConfig
from .coordinator import BucketDeleter
from .errors import FatalError
from .region import get_bucket_region
from .store import S3Store

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger("s3_bucket_deleter")


class _BelowError(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.ERROR


def configure_logging(verbose: bool = False) -> None:
    """
    Send INFO and WARNING lines to stdout and errors to stderr.

    Args:
        verbose: Also show per-object lines and retry attempts.
    """
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

    out = logging.StreamHandler(sys.stdout)
    out.setFormatter(formatter)
    out.addFilter(_BelowError())
    err = logging.StreamHandler(sys.stderr)
    err.setFormatter(formatter)
    err.setLevel(logging.ERROR)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.addHandler(out)
    root.addHandler(err)
    root.setLevel(logging.INFO)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def confirm(prompt: str) -> bool:
    """
    Get user confirmation for destructive operations.

    Args:
        prompt: The confirmation prompt to display.

    Returns:
        True if user confirms, False otherwise.
    """
    ans = input(f"{prompt} (y/N): ").strip().lower()
    return ans == "y"


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog="s3-bucket-deleter",
        description="Delete every object, version and delete marker in an S3 "
        "bucket, then the bucket itself",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s -b my-bucket              Delete a bucket after confirmation
  %(prog)s -b my-bucket -y -w 100    No prompt, 100 concurrent workers
  %(prog)s -b my-bucket --timeout 3600 --verbose

Credentials and profiles come from the usual AWS shared config files and
environment variables.
        """,
    )
    parser.add_argument("--bucket", "-b", type=str, help="Bucket to delete")
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Log every deleted object"
    )
    parser.add_argument(
        "--workers",
        "-w",
        type=int,
        default=DEFAULT_WORKERS,
        help=f"Number of concurrent workers (default: {DEFAULT_WORKERS})",
    )
    parser.add_argument(
        "--queue-size",
        type=int,
        default=None,
        help="Jobs buffered per pool (default: twice the worker count)",
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        default=10,
        help="Attempts per object before giving up (default: 10)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Cancel the run after this many seconds",
    )
    parser.add_argument(
        "--region", type=str, default=None, help="Bucket region (skips lookup)"
    )
    parser.add_argument("--profile", type=str, default=None, help="AWS profile")
    parser.add_argument(
        "--endpoint-url",
        type=str,
        default=None,
        help="Endpoint of an S3-compatible service",
    )
    parser.add_argument(
        "--yes", "-y", action="store_true", help="Skip the confirmation prompt"
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Delete the requested bucket. Returns the process exit code."""
    args = parse_arguments(argv)
    configure_logging(args.verbose)

    try:
        config = DeleterConfig.from_arguments(args)
        region = get_bucket_region(config)
        logger.info(f"Bucket {config.bucket} was found in {region}")

        if not config.assume_yes and not confirm(
            f"\nDelete bucket '{config.bucket}' and ALL its contents?"
        ):
            logger.info(f"Skipped: {config.bucket}")
            return 0

        store = S3Store.from_config(config, region)
        BucketDeleter.from_config(config, store).run(config.bucket)
    except FatalError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.warning("Operation interrupted by user")
        return 1
    except Exception:
        logger.exception(f"Unexpected error while deleting bucket {args.bucket}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
