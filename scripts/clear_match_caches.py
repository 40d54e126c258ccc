#!/usr/bin/env python3
"""
Clear match score caches.

Deletes every per-user match cache under the configured key prefix, or one
user's cache with --user. Used for administrative resets after scoring
weights change.

Example usage:
    python scripts/clear_match_caches.py
    python scripts/clear_match_caches.py --user 42
    python scripts/clear_match_caches.py --config /etc/matchscout/config.yaml
"""
import argparse
import logging
import sys
from pathlib import Path

# Ensure we can import from the project root
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from matchscout.cache import build_cache_service
from matchscout.config_loader import load_config

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Clear MatchScout match caches")
    parser.add_argument('--config', type=str, default='config.yaml', help='Path to config.yaml')
    parser.add_argument('--user', type=str, default=None, help='Only clear this user\'s cache')
    args = parser.parse_args()

    config = load_config(args.config)
    cache_service = build_cache_service(config.cache)

    if args.user:
        cache_service.for_user(args.user).clear()
        logger.info(f"Cleared match cache for user {args.user}")
        return 0

    deleted = cache_service.clear_all()
    logger.info(f"Cleared {deleted} match caches under prefix '{config.cache.key_prefix}'")
    return 0


if __name__ == "__main__":
    sys.exit(main())
