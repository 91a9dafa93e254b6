#!/usr/bin/env python3
"""
Run one brand visibility analysis from the command line.

The site must be registered first (see scripts/init_databases.py).

    python run_analysis.py --owner 42 --name "Acme Tools" --url https://acme-tools.io \
        --description "Hand tools for makers" --direct 2 --intermediate 2 --indirect 1
"""

import argparse
import json
import logging
import sys

from config.database import close_connections
from config.settings import settings
from graph_orchestrator import run_analysis
from models.errors import AnalysisError
from models.schemas import CategoryCounts, SiteProfile


def print_progress(step, status, message, data):
    print(f"[{step}] {status}: {message}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a brand visibility analysis for a registered site")
    parser.add_argument("--owner", required=True, help="Owner id the site is registered under")
    parser.add_argument("--name", required=True, help="Brand / site name")
    parser.add_argument("--url", required=True, help="Site URL")
    parser.add_argument("--description", default="", help="Short site description")
    parser.add_argument("--language", default="en", help="Language tag for generated queries")
    parser.add_argument("--direct", type=int, default=settings.DEFAULT_DIRECT_QUERIES)
    parser.add_argument("--intermediate", type=int, default=settings.DEFAULT_INTERMEDIATE_QUERIES)
    parser.add_argument("--indirect", type=int, default=settings.DEFAULT_INDIRECT_QUERIES)
    parser.add_argument(
        "--strategy",
        choices=["multi_call", "single_call"],
        default=settings.ANALYSIS_STRATEGY
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    site = SiteProfile(name=args.name, url=args.url, description=args.description, language=args.language)
    counts = CategoryCounts(direct=args.direct, intermediate=args.intermediate, indirect=args.indirect)

    try:
        record = run_analysis(args.owner, site, counts, args.strategy, progress_callback=print_progress)
    except AnalysisError as e:
        print(json.dumps(e.to_dict(), indent=2, ensure_ascii=False), file=sys.stderr)
        return 1
    finally:
        close_connections()

    print(record.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
