"""
Command-line entry point.

Extracts usernames from image files and writes their profile links to
stdout or a file.
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from .processing.logger import setup_logger
from .processing import (
    load_settings, ExtractionClient, BatchError, ClipboardError,
    load_input_file, select_input_files, process_batch, copy_all_links
)

logger = setup_logger('cli')


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='Extract Instagram usernames from screenshots using Gemini',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s shot1.png shot2.jpg             # Print links to stdout
  %(prog)s screenshots/*.png -o links.txt  # Write links to a file
        """
    )
    parser.add_argument('images', nargs='+', type=Path, help='Image files to scan')
    parser.add_argument('-o', '--output', type=Path, help='Write profile links to this file instead of stdout')
    return parser.parse_args(argv)


def make_sink(output: Optional[Path]):
    if output is None:
        return lambda text: print(text)

    def write_file(text: str) -> None:
        output.write_text(text + "\n", encoding='utf-8')

    return write_file


def main(argv: Optional[List[str]] = None, client: Optional[ExtractionClient] = None) -> int:
    args = parse_arguments(argv)
    settings = load_settings()

    files = []
    for path in args.images:
        if not path.is_file():
            print(f"Skipping {path}: not a file", file=sys.stderr)
            continue
        try:
            files.append(load_input_file(path))
        except OSError as e:
            logger.warning(f"Could not read {path}: {e}")
            print(f"Skipping {path}: {e.strerror or e}", file=sys.stderr)

    selected = select_input_files(files, settings.max_files)
    if not selected:
        print("No images to process.", file=sys.stderr)
        return 0

    if client is None:
        client = ExtractionClient.from_settings(settings)

    logger.info(f"Processing {len(selected)} image(s) from the command line")
    try:
        result_set = asyncio.run(process_batch(selected, client))
    except BatchError as e:
        logger.error(f"Batch failed on image {e.image_index}: {e.message}")
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    for result in result_set.results:
        found = ", ".join(f"@{u}" for u in result.usernames) or "No usernames found."
        print(f"{result.file.name}: {found}", file=sys.stderr)
    print(f"Found {result_set.total_usernames} username(s) across {len(result_set)} image(s).", file=sys.stderr)

    try:
        copy_all_links(result_set, make_sink(args.output))
    except ClipboardError as e:
        logger.error(f"Link write failed: {e.message}")
        print(f"Error: {e.message}", file=sys.stderr)
    else:
        logger.info(f"Wrote {result_set.total_usernames} link(s) to {args.output or 'stdout'}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
