#!/usr/bin/env python3
"""Backfill missing user_videos links from video_generations.

Finds every (user, video) pair with a recorded generation, an existing
analysis and a live profile but no user_videos row, and inserts the link.
Safe to rerun: pairs that are already linked are skipped.

Usage:
  uv run python scripts/repair_user_videos.py --dry-run
  uv run python scripts/repair_user_videos.py
"""

import argparse
import os
import sys

# Allow `app` imports when running the script directly.
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.db import SessionLocal  # noqa: E402
from app.observability import get_logger, set_service, setup_logging  # noqa: E402
from app.services.user_video_repair import count_missing_user_videos, repair_missing_user_videos  # noqa: E402

logger = get_logger("scripts.repair_user_videos")


def run(dry_run: bool) -> int:
    db = SessionLocal()
    try:
        missing = count_missing_user_videos(db)
        logger.info(
            "user_video_repair.pending",
            extra={"event": "user_video_repair.pending", "missing": missing, "dry_run": dry_run},
        )
        if dry_run or not missing:
            print(f"{missing} missing user_videos link(s){' (dry run, nothing written)' if dry_run else ''}", flush=True)
            return 0
        inserted = repair_missing_user_videos(db)
        print(f"Inserted {inserted} user_videos link(s)", flush=True)
        return 0
    finally:
        db.close()


def main() -> int:
    parser = argparse.ArgumentParser(description="Backfill missing user_videos links from video_generations")
    parser.add_argument("--dry-run", action="store_true", help="Only count the missing links")
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "INFO"))
    args = parser.parse_args()
    setup_logging(level=args.log_level)
    set_service("repair_user_videos")
    return run(dry_run=args.dry_run)


if __name__ == "__main__":
    sys.exit(main())
