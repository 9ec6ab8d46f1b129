#!/usr/bin/env python3
import argparse
import os
import sys
from typing import List, Optional

from huffstream.errors import HuffException
from huffstream.log_utils import setup_logging
from huffstream.processor import decompress_file


def output_path(src: str, out_dir: Optional[str], suffix: str) -> str:
    name = os.path.basename(src)
    if suffix and name.endswith(suffix):
        name = name[: -len(suffix)]
    else:
        name += ".unhf"
    return os.path.join(out_dir if out_dir else os.path.dirname(src), name)


def same_bytes(path_a: str, path_b: str) -> bool:
    with open(path_a, "rb") as fa, open(path_b, "rb") as fb:
        return fa.read() == fb.read()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Decompress tree-header Huffman files and optionally verify them.")
    parser.add_argument("sources", nargs="+", help="Compressed files to decode.")
    parser.add_argument("--out-dir", default=None, help="Output directory (default: next to each source).")
    parser.add_argument("--suffix", default=".hf", help="Suffix stripped from compressed file names.")
    parser.add_argument("--verify-dir", default=None, help="Compare decoded output with same-named originals here.")
    parser.add_argument("--overwrite", action="store_true")
    parser.add_argument("--debug-level", type=int, default=0, help="1 = summary diagnostics, 4 = per-symbol codes.")
    parser.add_argument("--log-dir", default=None, help="Also write logs to a timestamped file in this directory.")
    args = parser.parse_args(argv)

    setup_logging(log_dir=args.log_dir, debug_level=args.debug_level)

    sources = [p for p in args.sources if os.path.isfile(p)]
    if not sources:
        print(f"No input files found among {args.sources}", file=sys.stderr)
        return 1
    if args.out_dir:
        os.makedirs(args.out_dir, exist_ok=True)

    checked = 0
    failed = 0

    for src in sources:
        dst = output_path(src, args.out_dir, args.suffix)
        if not args.overwrite and os.path.exists(dst):
            print(f"Skip {src}: {dst} exists", file=sys.stderr)
            continue
        try:
            decompress_file(src, dst, debug_level=args.debug_level)
        except (HuffException, OSError) as exc:
            print(f"Error {src}: {exc}", file=sys.stderr)
            failed += 1
            continue

        if args.verify_dir:
            orig = os.path.join(args.verify_dir, os.path.basename(dst))
            if not os.path.exists(orig):
                print(f"Missing original for {src}: {orig}", file=sys.stderr)
                failed += 1
                continue
            if not same_bytes(orig, dst):
                print(f"Mismatch: {src}", file=sys.stderr)
                failed += 1
                continue
        checked += 1

    print(f"Checked: {checked}, Failed: {failed}")
    return 0 if failed == 0 else 2


if __name__ == "__main__":
    raise SystemExit(main())
