#!/usr/bin/env python3
"""
Cleanup script for files restored from the Redis file cache.

Default target is FILE_CACHE_DIR (or TMPDIR) from settings. Only regular
files directly inside the directory are considered.
Use --force to actually delete. Without --force, runs in dry-run mode.
"""
import argparse
import logging
import time
from pathlib import Path
from typing import Optional, Tuple

from redis_store.file_cache import default_scratch_dir
from redis_store.settings import settings
from redis_store.utils.logging import PACKAGE_LOGGER, enable_store_logging

logger = logging.getLogger(f"{PACKAGE_LOGGER}.cleanup_scratch")


def human_size(n: float) -> str:
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if n < 1024:
            return f"{n:.1f} {unit}"
        n /= 1024
    return f"{n:.1f} PB"


def cleanup(path: Path, dry_run: bool, older_than_hours: Optional[float] = None) -> Tuple[int, int]:
    files = 0
    bytes_freed = 0
    now = time.time()
    for child in path.iterdir():
        try:
            if not child.is_file() or child.is_symlink():
                continue
            stat = child.stat()
            if older_than_hours is not None:
                age_hours = (now - stat.st_mtime) / 3600.0
                if age_hours < older_than_hours:
                    continue
            files += 1
            bytes_freed += stat.st_size
            if not dry_run:
                child.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to process {child}: {e}")
    return files, bytes_freed


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(description="Clean up files restored from the file cache")
    parser.add_argument(
        "--path",
        type=str,
        default=settings.FILE_CACHE_DIR or settings.TMPDIR,
        help="Scratch directory (defaults to FILE_CACHE_DIR, then TMPDIR)",
    )
    parser.add_argument(
        "--older-than-hours",
        type=float,
        default=None,
        help="Only remove files last modified more than this many hours ago",
    )
    parser.add_argument("--force", action="store_true", help="Actually delete files (not just dry-run)")
    parser.add_argument("--verbose", action="store_true", help="Show debug records")
    parser.add_argument("--log-file", type=str, default=None, help="Also append log records to this file")
    args = parser.parse_args(argv)

    enable_store_logging(logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file)

    target = (Path(args.path) if args.path else default_scratch_dir()).resolve()
    if not target.exists() or not target.is_dir():
        logger.info(f"Nothing to clean: {target} does not exist or is not a directory.")
        return

    if target == Path("/"):
        logger.error("Refusing to operate on root directory.")
        raise SystemExit(3)

    dry_run = not args.force
    logger.info(f"Cleaning {'(dry-run) ' if dry_run else ''}{target}")

    files, bytes_freed = cleanup(target, dry_run=dry_run, older_than_hours=args.older_than_hours)

    logger.info(f"Files {'to remove' if dry_run else 'removed'}: {files}")
    logger.info(f"Space {'to free' if dry_run else 'freed'}: {human_size(bytes_freed)}")
    if dry_run:
        logger.info("Run again with --force to apply changes.")


if __name__ == "__main__":
    main()
