#!/usr/bin/env python3
"""
Download Mozilla's Readability.js for the headless-browser fallback extractor.

The script is fetched from the npm registry CDN and written next to the
pagepress package (or wherever PAGEPRESS_READABILITY_JS points).
"""

from __future__ import annotations

import argparse
from pathlib import Path

import requests

from pagepress.config import get_settings

DEFAULT_VERSION = "0.6.0"
SOURCE_URL = "https://unpkg.com/@mozilla/readability@{version}/Readability.js"


def main() -> int:
    parser = argparse.ArgumentParser(description="Fetch Readability.js for the fallback extractor")
    parser.add_argument("--out", default="", help="Output path (default: configured Readability.js location)")
    parser.add_argument("--version", default=DEFAULT_VERSION, help="@mozilla/readability release")
    parser.add_argument("--timeout", type=float, default=30.0, help="HTTP timeout in seconds")
    args = parser.parse_args()

    out_path = Path(args.out) if args.out else get_settings().readability_js
    url = SOURCE_URL.format(version=args.version)
    try:
        response = requests.get(url, timeout=args.timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        print(f"Failed to download {url}: {exc}")
        return 1
    if "Readability" not in response.text:
        print(f"Unexpected content at {url}")
        return 1

    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(response.text, encoding="utf-8")
    print(f"Wrote {out_path} ({len(response.text)} bytes)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
