#!/usr/bin/env python3
"""
CLI script to run the extractor only (no API key needed).

Prints the PageContent that would be sent for analysis, which helps check
which extraction strategy a page ends up with.

Usage:
    python run_extractor.py page.html --url https://example.com/story
    python run_extractor.py saved/*.html -o extracted.json -v
"""

import argparse
import json
import logging
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

from bias_lens.config import load_settings
from bias_lens.extractor import Extractor
from bias_lens.exceptions import BiasLensError
from bias_lens.logger import setup_logger


def main():
    parser = argparse.ArgumentParser(description="Extract analyzable text from saved HTML pages")
    parser.add_argument("files", nargs="+", help="HTML files to process")
    parser.add_argument("--url", "-u",
                        help="Page URL to record (default: file:// URL of each file)")
    parser.add_argument("--output", "-o", help="Output JSON file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    args = parser.parse_args()

    setup_logger(level=logging.DEBUG if args.verbose else logging.INFO)

    settings = load_settings()
    extractor = Extractor(
        min_content_length=settings.min_content_length,
        min_paragraph_length=settings.min_paragraph_length
    )

    results = []

    for filepath in args.files:
        path = Path(filepath)
        print(f"Extracting: {path.name}")

        try:
            html = path.read_text(errors='replace')
            content = extractor.extract(html, args.url or path.resolve().as_uri())
            results.append({
                "file": path.name,
                "status": "success",
                "content": content.model_dump()
            })
            print(f"  ✓ {len(content.content)} chars")

        except BiasLensError as e:
            results.append({"file": path.name, "status": "error", **e.to_response()})
            print(f"  ✗ Error: {e.message}")

        except OSError as e:
            results.append({"file": path.name, "status": "error", "error": str(e)})
            print(f"  ✗ Error: {e}")

    # ensure_ascii=False preserves unicode characters in the JSON
    output = json.dumps(results, indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(output)
        print(f"\nSaved to: {args.output}")
    else:
        print("\n" + output)


if __name__ == "__main__":
    main()
