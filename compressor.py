"""
huffzip command line front end

How to run:
  huffzip compress notes.txt notes.hf
  huffzip decompress notes.hf notes.out
  huffzip --debug 4 compress notes.txt notes.hf
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import huffman as huff
from bitio import BitInputStream, BitOutputStream


def run(action: str, src: Path, dst: Path, debug: int = 0) -> None:
    codec = huff.compress if action == "compress" else huff.decompress
    with BitInputStream.open(src) as bit_in:
        bit_out = BitOutputStream.open(dst)
        try:
            codec(bit_in, bit_out, debug)
        except BaseException:
            # output stream is already closed; do not leave a file that looks complete
            dst.unlink(missing_ok=True)
            raise


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="huffzip", description="Huffman file compressor")
    ap.add_argument("--debug", type=int, default=0,
                    help=f"Trace level on stderr ({huff.DEBUG_LOW}=summary, {huff.DEBUG_HIGH}=counts and codes)")
    ap.add_argument("action", choices=("compress", "decompress"))
    ap.add_argument("src", type=Path, help="Input file")
    ap.add_argument("dst", type=Path, help="Output file")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if not args.src.is_file():
        print(f"huffzip: no such file: {args.src}", file=sys.stderr)
        return 2
    if args.dst.exists() and args.src.samefile(args.dst):
        print(f"huffzip: refusing to overwrite the input file: {args.dst}", file=sys.stderr)
        return 2

    try:
        run(args.action, args.src, args.dst, args.debug)
    except (huff.HuffException, OSError) as e:
        print(f"huffzip: {args.action} failed: {e}", file=sys.stderr)
        return 1

    in_size = args.src.stat().st_size
    out_size = args.dst.stat().st_size
    print(f"{args.src} ({in_size} bytes) -> {args.dst} ({out_size} bytes), ratio {out_size / max(1, in_size):.3f}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
