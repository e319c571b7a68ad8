#!/usr/bin/env python3
"""Convert PSK meshes to glTF format.

Usage:
    python extract_models.py <input>... [-o <output>] [--no-skeleton] [--strict] [--list]

Examples:
    # Convert a single file
    python extract_models.py soldier.psk -o ./output

    # Convert several files without the skeleton
    python extract_models.py a.psk b.pskx -o ./output --no-skeleton

    # Show the chunk layout of a file
    python extract_models.py soldier.psk --list
"""
import argparse
import logging
import os
import sys
from pathlib import Path

from gltf_exporter import GLTFExporter
from psk_errors import PskError
from psk_parser import PskParser
from psk_reader import PskReader


def list_chunks(path: Path):
    """Print the chunk headers of a PSK file."""
    data = path.read_bytes()
    print(path)
    for header in PskParser().scan_chunks(data):
        print(
            f"  {header.offset:>10}  {header.name:<20} "
            f"count={header.data_count:<8} size={header.data_size}"
        )


def main():
    parser = argparse.ArgumentParser(
        description="Convert PSK meshes to glTF format"
    )
    parser.add_argument(
        "inputs",
        nargs="+",
        help="Input PSK files",
    )
    parser.add_argument(
        "-o", "--output",
        default="./output",
        help="Output directory for glTF files (default: ./output)",
    )
    parser.add_argument(
        "--no-skeleton",
        action="store_true",
        help="Skip skeleton and skin weight export",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on unknown chunks instead of skipping them",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List chunk headers instead of converting",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    files = []
    for name in args.inputs:
        path = Path(name)
        if not path.is_file():
            print(f"Input not found: {name}", file=sys.stderr)
            return 1
        files.append(path)

    if args.list:
        for path in files:
            try:
                list_chunks(path)
            except (PskError, ValueError) as e:
                print(f"Failed: {path} - {e}", file=sys.stderr)
                return 1
        return 0

    os.makedirs(args.output, exist_ok=True)

    reader = PskReader(strict_unknown=args.strict)
    success_count = 0
    fail_count = 0

    for psk_file in files:
        output_file = Path(args.output) / f"{psk_file.stem}.glb"

        try:
            exporter = GLTFExporter(reader.read(psk_file))
            exporter.export(str(output_file), include_skeleton=not args.no_skeleton)
            if args.verbose:
                print(f"Exported: {psk_file} -> {output_file}")
            success_count += 1
        except (PskError, ValueError) as e:
            print(f"Failed: {psk_file} - {e}", file=sys.stderr)
            fail_count += 1

    # Summary
    total = success_count + fail_count
    print(f"\nConverted {success_count}/{total} files to {args.output}")

    return 0 if fail_count == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
