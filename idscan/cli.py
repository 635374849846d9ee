"""Command-line interface for scanning identity documents.

Provides subcommands for scanning a single image and for scanning a
folder of images into one JSON results file.
"""

import argparse
import json
import sys
import time
from pathlib import Path

from idscan.exceptions import AllProvidersExhausted
from idscan.pipeline import DocumentScanner
from idscan.utils.config import load_config
from idscan.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_SUPPORTED_EXTENSIONS = (
    "*.png",
    "*.jpg",
    "*.jpeg",
    "*.tiff",
    "*.tif",
    "*.bmp",
    "*.webp",
)


def _find_documents(input_dir: Path) -> list[Path]:
    """Find all supported image files in a directory.

    Args:
        input_dir: Directory to scan for images.

    Returns:
        Sorted list of image file paths.
    """
    files: list[Path] = []
    for ext in _SUPPORTED_EXTENSIONS:
        files.extend(input_dir.glob(ext))
        files.extend(input_dir.glob(ext.upper()))
    return sorted(set(files))


def scan_file(file_path: Path, scanner: DocumentScanner) -> dict[str, object]:
    """Scan one image file.

    Args:
        file_path: Path to the image.
        scanner: Scanner to use.

    Returns:
        The record's wire shape plus the file name.
    """
    record = scanner.scan(file_path.read_bytes())
    return {"filename": file_path.name, **record.to_dict()}


def process_folder(
    input_dir: Path,
    output_json: Path,
    verbose: bool = False,
    scanner: DocumentScanner | None = None,
) -> dict[str, int]:
    """Scan all images in a folder and write the records to a JSON file.

    Args:
        input_dir: Directory containing images.
        output_json: Path for the output JSON file.
        verbose: Whether to print per-file progress.
        scanner: Scanner to use; built from the configuration if omitted.

    Returns:
        Summary dict with total, successful, and failed counts.
    """
    files = _find_documents(input_dir)
    if not files:
        logger.warning("No documents found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    scanner = scanner or DocumentScanner(load_config())
    logger.info("Found %d documents to scan", len(files))

    results: list[dict[str, object]] = []
    successful = 0
    failed = 0

    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Scanning [{i}/{len(files)}]: {file_path.name}")

        start_time = time.time()
        try:
            result = scan_file(file_path, scanner)
            result["status"] = "success"
            result["processing_time_s"] = round(time.time() - start_time, 2)
            results.append(result)
            successful += 1
        except (AllProvidersExhausted, OSError) as exc:
            logger.error("Failed to scan %s: %s", file_path.name, exc)
            results.append(
                {"filename": file_path.name, "status": "failed", "error": str(exc)}
            )
            failed += 1

    _write_json(results, output_json)
    logger.info("Results written to %s", output_json)

    summary = {"total": len(files), "successful": successful, "failed": failed}
    _print_summary(summary, output_json)
    return summary


def _write_json(results: list[dict[str, object]], output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(results, indent=2, ensure_ascii=False))


def _print_summary(summary: dict[str, int], output_json: Path) -> None:
    """Print batch summary to stdout.

    Args:
        summary: Counts of total, successful, and failed documents.
        output_json: Path to the output JSON.
    """
    print(f"\n{'=' * 50}")
    print("Batch Scan Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_json}")


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Identity Document Scanner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    scan_parser = subparsers.add_parser("scan", help="Scan a single document image")
    scan_parser.add_argument("file", type=Path, help="Image file to scan")
    scan_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    batch_parser = subparsers.add_parser("batch", help="Scan a folder of images")
    batch_parser.add_argument(
        "input_dir", type=Path, help="Input directory with images"
    )
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.json"),
        help="Output JSON file (default: results.json)",
    )
    batch_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )

    args = parser.parse_args(argv)

    config = load_config()
    setup_logging(config.log_level)

    if args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(args.input_dir, args.output, args.verbose)
    elif args.command == "scan":
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        try:
            result = scan_file(args.file, DocumentScanner(config))
        except AllProvidersExhausted as exc:
            print(f"Error: {exc.message}", file=sys.stderr)
            sys.exit(1)
        output_str = json.dumps(result, indent=2, ensure_ascii=False)
        if args.output:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(output_str)
            print(f"Output written to {args.output}")
        else:
            print(output_str)
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
