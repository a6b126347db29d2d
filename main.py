#!/usr/bin/env python3
"""
Command-line driver for the word-level Huffman text compressor.

Usage:
    python main.py                              # compress DEFAULT_INPUT into the current directory
    python main.py c input.txt [output_dir]     # compress a text file
    python main.py d compressed.txt.huff out.txt  # restore text from an archive
"""

import logging
import sys

from config import DEFAULT_INPUT, LOG_FORMAT, LOG_LEVEL
from hash_table import TableFullError
from Text_Compression import ArchiveError, compress_file, decompress_file

USAGE = "Usage: python main.py [c input_file [output_dir] | d archive_file output_file]"


def setup_logging(level=LOG_LEVEL):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def print_stats(stats):
    print(f"Time Elapsed: {stats['elapsed_ms']} ms")
    print(f"Uncompressed file size: {stats['uncompressed_kb']:.4f} KB")
    print(f"Compressed file size: {stats['compressed_kb']:.4f} KB")
    print(f"Compression ratio: {stats['compression_ratio']:.4f}%")


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    setup_logging()

    mode = argv[0] if argv else "c"

    try:
        if mode == "c" and len(argv) <= 3:
            input_path = argv[1] if len(argv) > 1 else DEFAULT_INPUT
            output_dir = argv[2] if len(argv) > 2 else "."
            stats = compress_file(input_path, output_dir)
            print(f"✅ Compressed '{input_path}' → '{stats['compressed_path']}'")
            print_stats(stats)
        elif mode == "d" and len(argv) == 3:
            decompress_file(argv[1], argv[2])
            print(f"✅ Decompressed '{argv[1]}' → '{argv[2]}'")
        else:
            print(USAGE)
            return 2
    except FileNotFoundError as e:
        print(f"Error: file not found: {e.filename}")
        return 1
    except (ArchiveError, TableFullError, UnicodeDecodeError, OSError) as e:
        print(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
