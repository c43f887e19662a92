#!/usr/bin/env python3
"""
Command-line script to run the full pipeline: extract, analyze, parse.

Requires ANTHROPIC_API_KEY (environment or .env file).  Pages can be
saved HTML files or live URLs.

Usage:
    python run_analyzer.py saved_page.html
    python run_analyzer.py --url https://example.com/story --url https://example.org/op-ed
    python run_analyzer.py page.html -o report.json -v
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import httpx

# Load .env file automatically
from dotenv import load_dotenv
load_dotenv()

from bias_lens.main import BiasAnalyzer
from bias_lens.config import load_settings
from bias_lens.exceptions import BiasLensError, UnauthorizedError, NotConfiguredError
from bias_lens.logger import setup_logger

FETCH_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/131.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


def load_pages(files: list[str], urls: list[str], timeout: float):
    """Yield (source, url, html-or-exception) for every requested page."""
    for filepath in files:
        path = Path(filepath)
        try:
            yield path.name, path.resolve().as_uri(), path.read_text(errors='replace')
        except OSError as e:
            yield path.name, path.resolve().as_uri(), e

    if urls:
        with httpx.Client(headers=FETCH_HEADERS, follow_redirects=True, timeout=timeout) as client:
            for url in urls:
                try:
                    response = client.get(url)
                    response.raise_for_status()
                    yield url, str(response.url), response.text
                except httpx.HTTPError as e:
                    yield url, url, e


def main():
    parser = argparse.ArgumentParser(
        description="Analyze web pages for bias and polarization"
    )
    parser.add_argument("files", nargs="*", help="Saved HTML files to analyze")
    parser.add_argument("--url", "-u", action="append", default=[],
                        help="Page URL to fetch and analyze (repeatable)")
    parser.add_argument("--output", "-o",
                        help="Output file for reports (default: print to stdout)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    args = parser.parse_args()

    if not args.files and not args.url:
        parser.error("give at least one HTML file or --url")

    setup_logger(level=logging.DEBUG if args.verbose else logging.INFO)

    settings = load_settings()
    analyzer = BiasAnalyzer(settings=settings)

    results = []

    for source, url, page in load_pages(args.files, args.url, settings.timeout):
        print(f"Analyzing: {source}", file=sys.stderr)

        if isinstance(page, Exception):
            results.append({"source": source, "status": "error", "error": str(page)})
            print(f"  ✗ Could not load page: {page}", file=sys.stderr)
            continue

        try:
            report = analyzer.analyze_page(page, url)
            results.append({
                "source": source,
                "status": "success",
                "report": report.model_dump()
            })
            print(f"  ✓ Polarization score: {report.polarization_score}", file=sys.stderr)

        except (NotConfiguredError, UnauthorizedError) as e:
            # Credential problems affect every page; stop early
            results.append({"source": source, "status": "error", **e.to_response()})
            print(f"  ✗ {e.message}", file=sys.stderr)
            break

        except BiasLensError as e:
            results.append({"source": source, "status": "error", **e.to_response()})
            print(f"  ✗ Error: {e.message}", file=sys.stderr)

    output_json = json.dumps(results, indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(output_json)
        print(f"\nReports saved to: {args.output}", file=sys.stderr)
    else:
        print(output_json)


if __name__ == "__main__":
    main()
