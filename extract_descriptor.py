#!/usr/bin/env python3
"""Print weighted LAB color descriptors for an image or a directory of images."""

import argparse
import logging
import sys
import time
from pathlib import Path

from colorspace import int_to_hex, lab_to_packed
from extractor import DEFAULT_COLOR_COUNT, ColorExtractor, ConfigurationError


IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.webp', '.bmp', '.gif'}


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def find_images(directory: Path) -> list[Path]:
    """Find all image files in directory."""
    return sorted(p for p in directory.iterdir() if p.suffix.lower() in IMAGE_EXTENSIONS)


def format_descriptor(descriptor: list[float], show_hex: bool = False) -> str:
    """One line per non-empty (L, a, b, weight) quadruple."""
    lines = []
    for i in range(0, len(descriptor), 4):
        L, a, b, weight = descriptor[i:i + 4]
        if weight == 0:
            break
        line = f"  {i // 4 + 1:2d}  L={L:7.2f} a={a:7.2f} b={b:7.2f}  {weight:6.1%}"
        if show_hex:
            line += f"  {int_to_hex(lab_to_packed((L, a, b)))}"
        lines.append(line)
    return '\n'.join(lines) if lines else "  (no colors)"


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description='Extract weighted LAB color descriptors from images.'
    )
    parser.add_argument(
        '--input', '-i',
        required=True,
        help='Image file or directory of images'
    )
    parser.add_argument(
        '--colors', '-k',
        type=int,
        default=DEFAULT_COLOR_COUNT,
        help=f'Number of representative colors (default {DEFAULT_COLOR_COUNT})'
    )
    parser.add_argument(
        '--max-delta',
        type=float,
        default=None,
        help='CIEDE2000 merge threshold (default 100 / colors)'
    )
    parser.add_argument(
        '--hex',
        action='store_true',
        help='Also print each color as a hex string'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        extractor = ColorExtractor(args.colors, max_delta=args.max_delta)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    input_path = Path(args.input)
    if input_path.is_dir():
        images = find_images(input_path)
        if not images:
            print(f"No images found in {input_path}", file=sys.stderr)
            return 2
    elif input_path.is_file():
        images = [input_path]
    else:
        print(f"Error: Input not found: {input_path}", file=sys.stderr)
        return 2

    failed = []
    for image_path in images:
        try:
            start = time.perf_counter()
            descriptor = extractor.extract_from_image(str(image_path))
            elapsed = time.perf_counter() - start
        except (FileNotFoundError, ValueError) as e:
            print(f"{image_path.name} → ERROR: {e}", file=sys.stderr)
            failed.append(image_path.name)
            continue

        print(f"{image_path.name} ({elapsed:.2f}s)")
        print(format_descriptor(descriptor, show_hex=args.hex))

    if failed:
        print(f"Failed ({len(failed)}/{len(images)}): {', '.join(failed)}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
