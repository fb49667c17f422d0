"""
Command-line decoder for .eml files.

Usage:
    # Single file
    python -m qemail.cli.decode message.eml

    # Directory, results to a JSON Lines file
    python -m qemail.cli.decode mails/ --output decoded.jsonl

    # Header-driven transfer decoding
    python -m qemail.cli.decode message.eml --transfer-decoding declared
"""

import argparse
import sys
from pathlib import Path
from typing import Iterator, List, Optional, TextIO

import structlog

from qemail.config import settings
from qemail.logging_config import setup_logging
from qemail.parsing import get_transfer_decoder, parse_eml_file

logger = structlog.get_logger(__name__)


def iter_eml_paths(paths: List[Path]) -> Iterator[Path]:
    """Expand directories into their .eml files (sorted), keep files as given."""
    for path in paths:
        if path.is_dir():
            yield from sorted(path.glob("*.eml"))
        else:
            yield path


def decode_files(
    paths: List[Path],
    out: TextIO,
    transfer_decoding: str = "heuristic",
    max_depth: Optional[int] = None,
    verbose: bool = False,
) -> int:
    """
    Decode every file and write one JSON object per line to `out`.

    Returns:
        Number of files that could not be read
    """
    decoder = get_transfer_decoder(transfer_decoding)
    failures = 0

    for path in iter_eml_paths(paths):
        try:
            parsed = parse_eml_file(str(path), decoder=decoder, max_depth=max_depth)
        except OSError as e:
            print(f"Error reading {path}: {e}", file=sys.stderr)
            failures += 1
            continue

        if verbose:
            logger.info("file_decoded", path=str(path), message_id=parsed.message_id)
        out.write(parsed.model_dump_json() + "\n")

    return failures


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qemail-decode",
        description="Decode raw .eml files into headers, subject, text and html (JSON Lines)",
    )
    parser.add_argument("paths", nargs="+", type=Path, help=".eml files or directories")
    parser.add_argument("-o", "--output", type=Path, help="Write JSON Lines here instead of stdout")
    parser.add_argument(
        "--transfer-decoding",
        choices=["heuristic", "declared"],
        default=settings.transfer_decoding,
        help="Transfer decoding strategy (default: %(default)s)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=settings.max_mime_depth,
        help="Multipart nesting limit (default: %(default)s)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every decoded file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()

    if args.output:
        with open(args.output, "w", encoding="utf-8") as out:
            failures = decode_files(
                args.paths, out, args.transfer_decoding, args.max_depth, args.verbose
            )
    else:
        failures = decode_files(
            args.paths, sys.stdout, args.transfer_decoding, args.max_depth, args.verbose
        )

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
