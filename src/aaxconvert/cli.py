"""
Command-line interface for aaxconvert.

Usage:
  aaxconvert book.aax                       # Convert using registry/explicit bytes
  aaxconvert -a 1CEB00DA -l *.aax           # Explicit bytes, add looped cover video
  aaxconvert --crack book.aax               # Look up bytes with rainbow tables
  aaxconvert list                           # Registered devices (Windows)
  aaxconvert lookup <file|checksum>         # Rainbow-table lookup only
  aaxconvert checksum book.aax              # Show checksum
  aaxconvert download book.adh              # Download from license file
  aaxconvert status                         # Tool availability
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys

from aaxconvert._version import __version__
from aaxconvert.config import AaxConvertConfig, get_config
from aaxconvert.convert import Converter, expand_inputs
from aaxconvert.cracker import CHECKSUM_PATTERN, RainbowCracker
from aaxconvert.downloaders import download_from_license
from aaxconvert.errors import AaxConvertError, OperationCancelled
from aaxconvert.log import level_for_verbosity, setup_logging
from aaxconvert.models import ACTIVATION_BYTES_PATTERN
from aaxconvert.probe import fetch_metadata
from aaxconvert.process import CancelToken
from aaxconvert.registry import DeviceRegistry
from aaxconvert.reporting import ProgressReporter
from aaxconvert.utils.deps import detect_capabilities, format_dependency_status

logger = logging.getLogger("aaxconvert.cli")

COMMANDS = ["convert", "list", "lookup", "checksum", "download", "status"]


def activation_bytes_arg(value: str) -> str:
    """argparse type for ``-a``."""
    if not ACTIVATION_BYTES_PATTERN.match(value):
        raise argparse.ArgumentTypeError(f"{value!r} is not 8 hex digits (e.g. 1CEB00DA)")
    return value.upper()


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Output detailed information (repeat for more)",
    )

    parser = argparse.ArgumentParser(
        prog="aaxconvert",
        description="Convert Audible AAX audiobooks into M4A/M4V files.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Activation bytes are taken from (first match wins):
  1. -a/--activation-bytes
  2. the Audible device registry (Windows, -d selects a device)
  3. a rainbow-table lookup of the file checksum (--crack)

Environment:
  RCRACK_PATH   rcrack executable (default: bundled per platform)
        """,
    )
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", metavar="command")

    convert = subparsers.add_parser(
        "convert",
        parents=[common],
        help="Convert AAX files (default command)",
    )
    convert.add_argument("files", nargs="+", help="AAX file(s) or glob pattern(s)")
    convert.add_argument("-o", "--output", metavar="FILENAME", help="Output filename")
    convert.add_argument("-p", "--path", metavar="PATH", help="Output path")
    convert.add_argument(
        "-a",
        "--activation-bytes",
        type=activation_bytes_arg,
        metavar="BYTES",
        help="4 byte activation secret to decrypt AAX files (e.g. 1CEB00DA)",
    )
    convert.add_argument(
        "-d",
        "--device",
        type=int,
        metavar="NUMBER",
        help="Registered device number whose activation bytes are used (Windows only)",
    )
    convert.add_argument("-l", "--loop", action="store_true", help="Add looped cover image to audiobook")
    convert.add_argument(
        "--crack",
        action="store_true",
        help="Look up activation bytes in rainbow tables if no other source has them",
    )

    subparsers.add_parser(
        "list",
        parents=[common],
        help="List registered devices and their activation bytes (Windows only)",
    )

    lookup = subparsers.add_parser(
        "lookup",
        parents=[common],
        help="Look up activation bytes in rainbow tables from inAudible-NG",
    )
    lookup.add_argument("target", metavar="FILE|CHECKSUM", help="AAX file or 40 digit checksum")

    checksum = subparsers.add_parser("checksum", parents=[common], help="Show the audiobook checksum")
    checksum.add_argument("file", help="AAX file")

    download = subparsers.add_parser("download", parents=[common], help="Download an audiobook from a .adh file")
    download.add_argument("file", help="License (.adh) file")
    download.add_argument("-p", "--path", metavar="PATH", help="Download directory")

    subparsers.add_parser("status", parents=[common], help="Show tool and platform availability")
    return parser


def apply_args(config: AaxConvertConfig, args: argparse.Namespace) -> AaxConvertConfig:
    """Return a copy of config with command-line flags applied."""
    activation = config.activation
    output = config.output
    if args.command == "convert":
        activation = dataclasses.replace(
            activation,
            activation_bytes=args.activation_bytes or activation.activation_bytes,
            device=args.device if args.device is not None else activation.device,
            crack=args.crack or activation.crack,
        )
        output = dataclasses.replace(
            output,
            directory=args.path or output.directory,
            filename=args.output or output.filename,
            loop=args.loop or output.loop,
        )
    log = dataclasses.replace(config.logging, level=level_for_verbosity(args.verbose, config.logging.level))
    return dataclasses.replace(config, activation=activation, output=output, logging=log)


def cmd_convert(args: argparse.Namespace, config: AaxConvertConfig, cancel: CancelToken) -> int:
    files = expand_inputs(args.files)
    logger.debug("Input files: %s", files)
    converter = Converter(config, cancel=cancel)
    batch = converter.convert_files(files)
    print(batch.summary())
    return 0 if batch.converted == len(batch.results) else 1


def cmd_list(args: argparse.Namespace, config: AaxConvertConfig, cancel: CancelToken) -> int:
    if not detect_capabilities(config).device_registry:
        print("This command is only available on Windows", file=sys.stderr)
        return 1
    table = DeviceRegistry().list_devices()
    print("Activation bytes of registered devices:\n")
    for index, secret in table.items():
        print(f"Device {index}: {secret}")
    return 0


def cmd_lookup(args: argparse.Namespace, config: AaxConvertConfig, cancel: CancelToken) -> int:
    cracker = RainbowCracker.from_config(config.cracker)
    if not cracker.is_available():
        print(
            f"Error: rcrack or its tables not found ({cracker.executable}, {cracker.tables_dir}). "
            "Set RCRACK_PATH.",
            file=sys.stderr,
        )
        return 1

    if CHECKSUM_PATTERN.match(args.target):
        checksum = args.target.lower()
    else:
        checksum = fetch_metadata(args.target, config, cancel=cancel).checksum

    print(f"Looking up activation bytes for checksum: {checksum}")
    print("This might take a moment ...")
    activation_bytes = cracker.lookup(checksum, cancel=cancel)
    print(f"Activation Bytes found: {activation_bytes}")
    return 0


def cmd_checksum(args: argparse.Namespace, config: AaxConvertConfig, cancel: CancelToken) -> int:
    metadata = fetch_metadata(args.file, config, cancel=cancel)
    print(f"Checksum for {args.file} is {metadata.checksum}")
    return 0


def cmd_download(args: argparse.Namespace, config: AaxConvertConfig, cancel: CancelToken) -> int:
    download_from_license(args.file, output_dir=args.path, config=config, reporter=ProgressReporter(), cancel=cancel)
    print("Download complete!")
    return 0


def cmd_status(args: argparse.Namespace, config: AaxConvertConfig, cancel: CancelToken) -> int:
    print(format_dependency_status(config))
    return 0


HANDLERS = {
    "convert": cmd_convert,
    "list": cmd_list,
    "lookup": cmd_lookup,
    "checksum": cmd_checksum,
    "download": cmd_download,
    "status": cmd_status,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point for aaxconvert CLI."""
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()

    if not argv:
        parser.print_help()
        return 0

    # Bare file arguments mean "convert"
    if argv[0] not in COMMANDS and argv[0] not in ("-h", "--help", "-V", "--version"):
        argv.insert(0, "convert")

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0

    config = apply_args(get_config(), args)
    setup_logging(config.logging.level)
    logger.debug("RCRACK_PATH: %s", config.cracker.executable)

    cancel = CancelToken()
    try:
        return HANDLERS[args.command](args, config, cancel)
    except KeyboardInterrupt:
        # Running children were already terminated by ManagedProcess
        logger.error("Cancelled")
        return 1
    except OperationCancelled as e:
        logger.error("%s", e)
        return 1
    except (AaxConvertError, OSError) as e:
        logger.error("%s", e)
        logger.debug("Traceback", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
