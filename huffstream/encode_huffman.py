#!/usr/bin/env python3
import argparse
import json
import os
import sys
from typing import Dict, List, Optional

from huffstream.errors import HuffException
from huffstream.log_utils import setup_logging
from huffstream.processor import compress_file


def output_path(src: str, out_dir: Optional[str], suffix: str) -> str:
    name = os.path.basename(src) + suffix
    return os.path.join(out_dir if out_dir else os.path.dirname(src), name)


def write_json(path: str, payload: Dict) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)


def ratio(raw: float, comp: float) -> float:
    return raw / comp if comp > 0 else 0.0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Compress files with tree-header Huffman coding.")
    parser.add_argument("sources", nargs="+", help="Files to compress.")
    parser.add_argument("--out-dir", default=None, help="Output directory (default: next to each source).")
    parser.add_argument("--suffix", default=".hf", help="Suffix appended to compressed file names.")
    parser.add_argument("--overwrite", action="store_true")
    parser.add_argument("--summary", default=None, help="Write a JSON report of sizes and ratios here.")
    parser.add_argument("--debug-level", type=int, default=0, help="1 = summary diagnostics, 4 = per-symbol codes.")
    parser.add_argument("--log-dir", default=None, help="Also write logs to a timestamped file in this directory.")
    args = parser.parse_args(argv)
    if not args.suffix:
        parser.error("--suffix must not be empty; outputs would overwrite their sources")

    setup_logging(log_dir=args.log_dir, debug_level=args.debug_level)

    sources = [p for p in args.sources if os.path.isfile(p)]
    if not sources:
        print(f"No input files found among {args.sources}", file=sys.stderr)
        return 1
    if args.out_dir:
        os.makedirs(args.out_dir, exist_ok=True)

    encoded = 0
    skipped = 0
    errors = 0
    rows = []
    totals = {"raw_bytes": 0, "comp_bytes": 0}

    for src in sources:
        dst = output_path(src, args.out_dir, args.suffix)
        if not args.overwrite and os.path.exists(dst):
            skipped += 1
            continue
        try:
            stats = compress_file(src, dst, debug_level=args.debug_level)
        except (HuffException, OSError) as exc:
            print(f"Error {src}: {exc}", file=sys.stderr)
            errors += 1
            continue

        raw_bytes = os.path.getsize(src)
        comp_bytes = os.path.getsize(dst)
        totals["raw_bytes"] += raw_bytes
        totals["comp_bytes"] += comp_bytes
        rows.append({
            "source": src,
            "output": dst,
            "raw_bytes": raw_bytes,
            "comp_bytes": comp_bytes,
            "header_bits": stats.header_bits,
            "ratio": ratio(raw_bytes, comp_bytes),
        })
        print(f"{src} -> {dst}: {raw_bytes} -> {comp_bytes} bytes (ratio {ratio(raw_bytes, comp_bytes):.3f})")
        encoded += 1

    if args.summary:
        write_json(args.summary, {
            "files": rows,
            "raw_bytes": totals["raw_bytes"],
            "comp_bytes": totals["comp_bytes"],
            "weighted_ratio": ratio(totals["raw_bytes"], totals["comp_bytes"]),
        })

    print(f"Encoded: {encoded}")
    print(f"Skipped: {skipped}")
    if errors:
        print(f"Errors: {errors}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
