#!/usr/bin/env python3
"""
Database initialization script.

Tests the Redis connection and, optionally, registers a site for an owner so
it can be analyzed.

    python scripts/init_databases.py
    python scripts/init_databases.py --owner 42 --name "Acme Tools" --url https://acme-tools.io
"""

import argparse
import sys
import logging
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.database import (
    get_redis_client,
    test_connections,
    close_connections
)
from models.errors import PersistenceError
from models.schemas import SiteProfile
from storage.site_directory import RedisSiteDirectory

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main():
    """Test the Redis connection and register a site if requested."""
    parser = argparse.ArgumentParser(description="Check Redis and register a site")
    parser.add_argument("--owner", help="Owner id to register the site under")
    parser.add_argument("--name", help="Site / brand name")
    parser.add_argument("--url", help="Site URL")
    parser.add_argument("--description", default="")
    parser.add_argument("--language", default="en")
    args = parser.parse_args()

    print("=" * 60)
    print("Database Initialization Script")
    print("=" * 60)
    print()

    print("Testing database connections...")
    status = test_connections()

    print("\n📊 Connection Status:")
    print("-" * 60)

    if status["redis"]["connected"]:
        print("✅ Redis: Connected")
    else:
        print(f"❌ Redis: Failed - {status['redis']['error']}")
        print("   Make sure Redis is running: docker-compose up -d")
        print("=" * 60)
        sys.exit(1)

    print()

    if args.owner and args.url:
        profile = SiteProfile(
            name=args.name or args.url,
            url=args.url,
            description=args.description,
            language=args.language
        )
        try:
            record = RedisSiteDirectory(get_redis_client()).register_site(args.owner, profile)
        except PersistenceError as e:
            print(f"❌ Error registering site: {e}")
            sys.exit(1)
        print(f"✅ Site registered: {record.profile.url} (site_id={record.site_id}, owner={record.owner_id})")
        print()

    print("=" * 60)
    print("✅ Databases ready")
    print("=" * 60)

    close_connections()


if __name__ == "__main__":
    main()
