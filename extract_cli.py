# extract_cli.py

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from listing_extractor.core.fetch import close_browser_sync
from listing_extractor.logs import setup_logging
from listing_extractor.schemas.models import FetchPolicy
from listing_extractor.tools.listing_extract import extract_listing_from_html, extract_listing_sync


def main() -> int:
    p = argparse.ArgumentParser(description="Listing extraction")
    p.add_argument("--url", type=str, required=True, help="Listing URL (also selects the parser for --file)")
    p.add_argument("--file", type=str, default=None, help="Parse a saved HTML page instead of fetching --url")
    p.add_argument("--no-browser", action="store_true", help="Never launch the headless browser")
    p.add_argument("--timeout", type=float, default=None, help="Fetch timeout in seconds")
    p.add_argument("--pretty", type=int, choices=(0, 1), default=1)

    args = p.parse_args()
    setup_logging()

    if args.file:
        html = Path(args.file).read_text(encoding="utf-8", errors="replace")
        result = extract_listing_from_html(args.url, html)
    else:
        overrides: dict[str, object] = {}
        if args.no_browser:
            overrides["allow_browser"] = False
        if args.timeout is not None:
            overrides["timeout_s"] = args.timeout
        try:
            result = extract_listing_sync(args.url, policy=FetchPolicy.from_env(**overrides))
        finally:
            close_browser_sync()

    # Minimal console summary (stderr keeps stdout pure JSON)
    if result.success:
        confidence = result.validation.confidence if result.validation else 0
        print(f"extracted: {len(result.extracted_fields or [])} fields (confidence: {confidence})", file=sys.stderr)
    else:
        print(f"failed [{result.error_code.value if result.error_code else 'error'}]: {result.error}", file=sys.stderr)

    payload = result.to_payload()
    print(json.dumps(payload, indent=2 if args.pretty else None, ensure_ascii=False))

    return 0 if result.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
