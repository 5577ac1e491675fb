import argparse
import logging
import mimetypes
import sys
from pathlib import Path

from .config import JPEG_QUALITY, PDF_MIME_TYPE, RENDER_SCALE, default_workers
from .errors import ConversionError
from .pipeline import convert_file


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(prog="pdfjpg", description="Convert every page of a PDF to a JPEG.")
    ap.add_argument("pdf", help="PDF file to convert")
    ap.add_argument("--out", default=None, help="output folder (default: <pdf name>_jpg next to the PDF)")
    ap.add_argument("--scale", type=float, default=RENDER_SCALE, help="render scale, 1.0 = 72 dpi")
    ap.add_argument("--quality", type=int, default=JPEG_QUALITY, help="JPEG quality 1..100")
    ap.add_argument("--workers", type=int, default=None, help="pages rendered at once")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    p = Path(args.pdf)
    if not p.exists():
        print(f"Not found: {p}", file=sys.stderr)
        return 2
    if mimetypes.guess_type(p.name)[0] != PDF_MIME_TYPE:
        print(f"[WARN] {p.name}: not a PDF file", file=sys.stderr)
        return 2

    out = Path(args.out) if args.out else p.parent / f"{p.stem}_jpg"
    workers = args.workers or default_workers()

    def progress(n, total):
        print(f"[OK] page {n}/{total}")

    try:
        paths = convert_file(p, out, scale=args.scale, quality=args.quality,
                             workers=workers, on_page=progress)
    except (ConversionError, ValueError) as e:
        print(f"[ERROR] {p.name}: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logging.getLogger(__name__).debug("conversion crashed", exc_info=True)
        print(f"[ERROR] {p.name}: {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    print(f"\nSaved {len(paths)} pages under {out.resolve()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
