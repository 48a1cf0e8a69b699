"""
Command-Line Interface for Lithophane Generator

Usage:
    lithogen input.png -o output.stl
    lithogen input.png --base-height 2 --model-height 10 -o output.stl
    lithogen --batch photos/ --output-dir models/

"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional
import time

from . import __version__
from .generator import LithophaneGenerator, BatchProcessor


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="lithogen",
        description="Lithophane Generator - Convert grayscale images to printable STL solids",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  lithogen photo.png -o photo.stl
      Convert photo.png with default heights

  lithogen photo.png --base-height 0.8 --model-height 3 --invert -o photo.stl
      Classic backlit lithophane: dark pixels are thick

  lithogen photo.png --image-scale 0.25 --scale 0.2 -o small.stl
      Downsample the image, then print 0.2 mm per pixel

  lithogen --batch photos/ --output-dir models/
      Convert every PNG in photos/
        """
    )

    # Input
    parser.add_argument(
        "input",
        nargs="?",
        help="Input grayscale image file"
    )

    # Output
    parser.add_argument(
        "-o", "--output",
        help="Output STL file (default: input name with .stl)"
    )

    # Heights
    parser.add_argument(
        "-b", "--base-height",
        type=float,
        default=1.0,
        help="Thickness below the lowest surface point (default: 1.0)"
    )

    parser.add_argument(
        "-m", "--model-height",
        type=float,
        default=5.0,
        help="Height of a white pixel above a black one (default: 5.0)"
    )

    parser.add_argument(
        "--invert",
        action="store_true",
        help="Invert luma so dark pixels become high"
    )

    parser.add_argument(
        "--smooth",
        type=float,
        default=0.0,
        help="Gaussian smoothing sigma in pixels (default: 0, off)"
    )

    parser.add_argument(
        "--image-scale",
        type=float,
        help="Resize the image by this factor before meshing"
    )

    # Output settings
    parser.add_argument(
        "--scale",
        type=float,
        default=1.0,
        help="Output scale factor for vertex positions (default: 1.0)"
    )

    parser.add_argument(
        "--ascii",
        action="store_true",
        help="Write ASCII STL instead of binary"
    )

    # Batch processing
    parser.add_argument(
        "--batch",
        help="Batch process directory of images"
    )

    parser.add_argument(
        "--output-dir",
        help="Output directory for batch processing"
    )

    parser.add_argument(
        "--pattern",
        default="*.png",
        help="File pattern for batch processing (default: *.png)"
    )

    # Misc
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output with progress"
    )

    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print mesh statistics"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def configure_logging(verbose: bool):
    """Route library log records to stderr."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s"
    )


def print_stats(stats: dict):
    """Print mesh statistics."""
    print("\nMesh Statistics:")
    print(f"  Grid size: {stats['grid_size']}")
    print(f"  Triangles: {stats['triangle_count']}")
    print(f"  Degenerate triangles: {stats['degenerate_triangles']}")
    print(f"  Height range: {stats['min_height']:.4f} - {stats['max_height']:.4f}")
    print(f"  Floor: {stats['floor_height']:.4f}")
    print(f"  Volume: {stats['volume']:.4f}")


def process_single(args) -> int:
    """Process a single image file."""
    if not args.input:
        print("Error: No input file specified", file=sys.stderr)
        return 1

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        return 1

    output_path = Path(args.output) if args.output else input_path.with_suffix(".stl")

    if args.verbose:
        print(f"Input image file: {input_path}")
        print(f"Output stl file: {output_path}")
        print(f"Base height: {args.base_height}")
        print(f"Model height: {args.model_height}")
        print()

    start_time = time.time()

    try:
        generator = LithophaneGenerator(
            base_height=args.base_height,
            model_height=args.model_height,
            invert=args.invert,
            smooth_sigma=args.smooth
        )

        generator.load_image(input_path, image_scale=args.image_scale)
        generator.build_heightmap()
        generator.generate_mesh()

        if args.stats or args.verbose:
            print_stats(generator.get_mesh_stats())

        generator.export_stl(output_path, binary=not args.ascii, scale=args.scale)
        if args.verbose:
            print(f"Exported: {output_path}")

        elapsed = time.time() - start_time
        if args.verbose:
            print(f"\nCompleted in {elapsed:.2f}s")

        return 0

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


def process_batch(args) -> int:
    """Process a batch of images."""
    batch_dir = Path(args.batch)
    if not batch_dir.is_dir():
        print(f"Error: Batch directory not found: {batch_dir}", file=sys.stderr)
        return 1

    output_dir = Path(args.output_dir) if args.output_dir else batch_dir / "output"

    start_time = time.time()

    try:
        processor = BatchProcessor(
            base_height=args.base_height,
            model_height=args.model_height,
            invert=args.invert,
            smooth_sigma=args.smooth
        )

        outputs = processor.process_directory(
            batch_dir,
            output_dir,
            pattern=args.pattern,
            binary=not args.ascii,
            scale=args.scale,
            image_scale=args.image_scale
        )

        if args.stats or args.verbose:
            for output_path in outputs:
                print(f"\n{output_path}")
                print_stats(processor.stats[output_path])

        elapsed = time.time() - start_time
        print(f"Processed {len(outputs)} files in {elapsed:.2f}s")
        print(f"Output directory: {output_dir}")

        return 0

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    if args.batch:
        return process_batch(args)
    else:
        return process_single(args)


if __name__ == "__main__":
    sys.exit(main())
