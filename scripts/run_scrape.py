"""
Scrape one URL from the CLI and print the stored result as JSON.
"""

from __future__ import annotations

import argparse
import json
import sys

from app.config import get_log_level
from app.errors import ScraperAppError
from app.logging_utils import configure_logging
from app.schemas.scraping import ScrapeResultResponse
from app.services.scraping_service import get_scraping_service


def main() -> int:
    parser = argparse.ArgumentParser(description="Scrape a web page and store the result.")
    parser.add_argument("url", help="Absolute http(s) URL to scrape.")
    parser.add_argument(
        "--owner-id",
        dest="owner_id",
        type=int,
        default=1,
        help="User ID the result is stored for.",
    )
    args = parser.parse_args()

    configure_logging(get_log_level())
    service = get_scraping_service()
    try:
        result = service.scrape_now(args.url, args.owner_id)
    except ScraperAppError as exc:
        print(json.dumps({"code": exc.code, "message": exc.message}, indent=2), file=sys.stderr)
        return 1

    payload = ScrapeResultResponse.from_domain(result).model_dump(mode="json")
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
