"""
Command-line batch editing: apply page and item edits to a PDF and export it.
"""
import argparse
import logging
import os
import sys

from .core.errors import InkboardError
from .core.page.page_order import Direction
from .core.session import EditSession

logger = logging.getLogger(__name__)


def _split(value, parts, option):
    fields = value.split(":", parts - 1)
    if len(fields) != parts:
        raise argparse.ArgumentTypeError(f"Malformed {option} value: {value!r}")
    return fields


def build_parser():
    parser = argparse.ArgumentParser(
        prog="inkboard",
        description="Reorder, rotate, delete and annotate PDF pages.",
    )
    parser.add_argument("input", help="PDF file to edit")
    parser.add_argument("-o", "--output", help="Output path (default: edited-<input>)")
    parser.add_argument("--move", action="append", default=[], metavar="PAGE:up|down",
                        help="Move a page one slot up or down")
    parser.add_argument("--rotate", action="append", default=[], metavar="PAGE:DEGREES",
                        help="Rotate a page by a multiple of 90 degrees")
    parser.add_argument("--delete", action="append", default=[], type=int, metavar="PAGE",
                        help="Delete a page (applied after moves and rotations)")
    parser.add_argument("--text", action="append", default=[], metavar="PAGE:X:Y:TEXT",
                        help="Add text at a normalized top-left position")
    parser.add_argument("--image", action="append", default=[], metavar="PAGE:PATH",
                        help="Insert a PNG or JPEG image")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def apply_edits(session, args):
    """Apply the edits given on the command line, in a fixed order."""
    for value in args.text:
        page, x, y, text = _split(value, 4, "--text")
        session.add_text(int(page), float(x), float(y), text=text)

    for value in args.image:
        page, path = _split(value, 2, "--image")
        with open(path, "rb") as f:
            session.add_image(int(page), f.read())

    for value in args.move:
        page, where = _split(value, 2, "--move")
        direction = Direction.PREV if where == "up" else Direction.NEXT
        if not session.move_page(direction, int(page)):
            logger.warning("Page %s cannot move %s", page, where)

    for value in args.rotate:
        page, degrees = _split(value, 2, "--rotate")
        degrees = int(degrees)
        if degrees % 90:
            raise argparse.ArgumentTypeError(f"Rotation must be a multiple of 90: {degrees}")
        step = 90 if degrees > 0 else -90
        for _ in range(abs(degrees) // 90 % 4):
            session.rotate_page(step, int(page))

    # Highest first so earlier numbers still refer to the same pages
    for page in sorted(set(args.delete), reverse=True):
        session.delete_page(page)


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    session = EditSession()
    try:
        with open(args.input, "rb") as f:
            session.load(f.read(), os.path.basename(args.input))

        apply_edits(session, args)
        data = session.export()
        pages = session.page_count

        output = args.output or os.path.join(os.path.dirname(args.input),
                                             session.export_filename())
        with open(output, "wb") as f:
            f.write(data)
    except (InkboardError, argparse.ArgumentTypeError, OSError, ValueError) as e:
        logger.error("%s", e)
        return 1
    finally:
        session.close()

    logger.info("Wrote %s (%d pages)", output, pages)
    return 0


if __name__ == "__main__":
    sys.exit(main())
