import argparse
import json
import logging
import sqlite3

from .http_client import HttpTransport
from .pagination import FirstPageFetchError
from .scraper import ApplicationsScraper
from .settings import CONFLICT_POLICIES, MAX_PAGES, get_settings
from .storage import SQLiteApplicationStore


def build_parser():
    parser = argparse.ArgumentParser(
        description="Scrape City of Charles Sturt development applications into SQLite",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="Search results URL (file:// URLs read a saved page)",
    )
    parser.add_argument(
        "--database",
        default=None,
        help="SQLite database path",
    )
    parser.add_argument(
        "--max-pages",
        type=int,
        default=None,
        help=f"Stop after this many pages (at most {MAX_PAGES})",
    )
    parser.add_argument(
        "--conflict-policy",
        choices=CONFLICT_POLICIES,
        default=None,
        help="What to do with an application that is already stored",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Request timeout in seconds",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, etc.)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit one JSON log line per page and a JSON summary",
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(message)s",
    )
    settings = get_settings().override(
        search_url=args.url,
        database_path=args.database,
        max_pages=args.max_pages,
        conflict_policy=args.conflict_policy,
        timeout=args.timeout,
    )

    def log_fn(entry):
        print(json.dumps(entry))

    transport = HttpTransport(
        timeout=settings.timeout,
        retries=settings.retries,
        backoff_s=settings.backoff_s,
        min_interval_s=settings.min_interval_s,
    )
    try:
        with SQLiteApplicationStore(
            settings.database_path, conflict_policy=settings.conflict_policy
        ) as store:
            scraper = ApplicationsScraper(
                store,
                transport,
                url=settings.search_url,
                max_pages=settings.max_pages,
                log_fn=log_fn if args.log_json else None,
                storage_path=settings.database_path,
            )
            result = scraper.run()
    finally:
        transport.close()

    if args.log_json:
        print(json.dumps(result.to_dict()))
    return result


def _safe_main(argv=None):
    try:
        main(argv)
    except SystemExit:
        raise
    except (FirstPageFetchError, sqlite3.Error) as exc:
        logging.getLogger("cs_scraper.run").exception("Run failed")
        print(json.dumps({"error": str(exc)}))
        raise SystemExit(1)


if __name__ == "__main__":
    _safe_main()
