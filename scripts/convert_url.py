#!/usr/bin/env python3
"""
Convert a web article or an X post into an EPUB file.

Pipeline:
  1) Validate the URL (social posts go straight to the read API)
  2) Fetch the page and extract the article (heuristic, then Readability)
  3) Split long articles into chapters
  4) Write the EPUB archive
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from pagepress import Converter
from pagepress.config import get_settings
from pagepress.errors import PagePressError
from pagepress.logging import configure_logging


def main() -> int:
    parser = argparse.ArgumentParser(description="Convert a web page or X post to EPUB")
    parser.add_argument("--url", required=True, help="Article or post URL")
    parser.add_argument("--out", default="", help="Output .epub path (default: generated name in the current directory)")
    parser.add_argument("--log-level", default="", help="Override PAGEPRESS_LOG_LEVEL")
    parser.add_argument("--console-log", action="store_true", help="Human-readable logs instead of JSON lines")
    args = parser.parse_args()

    configure_logging(log_level=args.log_level or None, json_format=False if args.console_log else None)
    converter = Converter.from_settings(get_settings())
    try:
        result = asyncio.run(converter.convert_url(args.url))
    except PagePressError as exc:
        print(f"error ({exc.kind}): {exc}")
        return 1

    out_path = Path(args.out) if args.out else Path.cwd() / result.filename
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(result.data)
    print(f"Wrote {out_path} ({result.strategy.value}, {len(result.chapters)} chapter(s), {len(result.data)} bytes)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
