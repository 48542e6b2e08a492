"""
Command-line entry point for SCP Merge.

Usage:
    scp-merge A.scp B.scp -o merged.scp -t 10:1:1 -t 11:0:1

Every track slot comes from the first image unless a ``-t TRACK:SIDE:SOURCE``
override routes it to the second one (SOURCE 1).
"""

import argparse
import logging
import sys
from contextlib import ExitStack
from typing import List, Optional, Sequence

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from scpmerge import __version__
from scpmerge.core import MergeResult, MergeSettings, merge_images
from scpmerge.imaging import (
    DiskImage,
    ImageError,
    ImageUnsupportedError,
    load_image,
    slot_name,
    verify_image_checksum,
)
from scpmerge.utils import (
    EXIT_FAILURE,
    EXIT_USAGE,
    handle_image_error,
    setup_logging,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scp-merge",
        description="Merge two SCP flux images track by track.",
    )
    parser.add_argument("scp_in", nargs="*", metavar="INPUT",
                        help="Input SCP images (exactly two)")
    parser.add_argument("-o", dest="scp_out", required=True, metavar="OUTPUT",
                        help="Output SCP image")
    parser.add_argument("-t", dest="tracks", action="append", default=[],
                        metavar="TRACK:SIDE:SOURCE",
                        help="Take TRACK/SIDE from input SOURCE (0 or 1); repeatable")
    parser.add_argument("--verify", action="store_true",
                        help="Re-check the output checksum after writing")
    parser.add_argument("--no-atomic", dest="atomic", action="store_false",
                        help="Write the output in place instead of via a temp file")
    parser.add_argument("--log-file", default=None, help="Write a debug log to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def load_sources(settings: MergeSettings, stack: ExitStack,
                 err_console: Console) -> Optional[List[DiskImage]]:
    """
    Load both inputs, reporting every input with an unsupported timing mode.

    Every input is examined even when an earlier one fails, so each
    unsupported input is reported before the first other failure is raised.

    Returns:
        Loaded images, or None if any input was rejected as unsupported

    Raises:
        ImageError / OSError: First non-unsupported load failure
    """
    images: List[DiskImage] = []
    rejected = False
    failure: Optional[Exception] = None
    for path in settings.inputs:
        try:
            image = load_image(path)
        except ImageUnsupportedError as e:
            err_console.print(handle_image_error(e, 'load'), style="red", markup=False)
            rejected = True
            continue
        except (ImageError, OSError) as e:
            if failure is None:
                failure = e
            continue
        stack.enter_context(image)
        images.append(image)
    if failure is not None:
        raise failure
    return None if rejected else images


def print_summary(console: Console, result: MergeResult, settings: MergeSettings) -> None:
    table = Table(title=f"Merged {result.output_path}", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for index, path in enumerate(settings.inputs):
        table.add_row(f"Source {index}", f"{path} ({result.tracks_from(index)} tracks)")
    overridden = [slot_name(slot) for slot, src in sorted(result.slot_sources.items()) if src]
    table.add_row("From source 1", ", ".join(overridden) or "-")
    table.add_row("Tracks written", str(result.tracks_written))
    table.add_row("Flux bytes", f"{result.flux_bytes:,}")
    table.add_row("Checksum", f"{result.checksum:#010x}")
    console.print(table)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point for SCP Merge.

    Returns:
        Process exit status
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    console = Console()
    err_console = Console(stderr=True, soft_wrap=True)

    try:
        settings = MergeSettings.from_args(
            args.scp_in, args.scp_out, args.tracks,
            atomic=args.atomic, verify=args.verify,
            log_file=args.log_file, verbose=args.verbose,
        )
    except ValidationError as e:
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"])
            message = f"{location}: {error['msg']}" if location else error["msg"]
            err_console.print(message, style="red", markup=False)
        return EXIT_USAGE
    except ValueError as e:
        err_console.print(str(e), style="red", markup=False)
        return EXIT_USAGE

    setup_logging(settings.log_file, logging.DEBUG if settings.verbose else logging.WARNING)

    with ExitStack() as stack:
        try:
            sources = load_sources(settings, stack, err_console)
            if sources is None:
                return EXIT_FAILURE
            result = merge_images(sources, settings.selection, settings.output,
                                  atomic=settings.atomic)
        except (ImageError, OSError) as e:
            logger.debug("Merge failed", exc_info=True)
            err_console.print(handle_image_error(e), style="red", markup=False)
            return EXIT_FAILURE

    if settings.verify:
        try:
            report = verify_image_checksum(settings.output)
        except ImageError as e:
            err_console.print(handle_image_error(e, 'verify'), style="red", markup=False)
            return EXIT_FAILURE
        if not report.valid:
            err_console.print(
                f"Checksum mismatch: stored {report.stored:#010x}, "
                f"computed {report.computed:#010x}",
                style="red", markup=False,
            )
            return EXIT_FAILURE

    print_summary(console, result, settings)
    return 0


if __name__ == "__main__":
    sys.exit(main())
