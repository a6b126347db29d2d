import io
import logging
import os
import pickle
import time

from config import (
    ARCHIVE_SUFFIX,
    CODES_FILENAME,
    CODES_PER_LINE,
    COMPRESSED_FILENAME,
    KILO,
    STATS_PRECISION,
    TABLE_CAPACITY,
)
from huffman import CodeTableError, huffman_decoding, huffman_encoding, unpack_bits

logger = logging.getLogger(__name__)


class ArchiveError(ValueError):
    """The archive is not a valid compressed-text archive."""


class _ArchiveUnpickler(pickle.Unpickler):
    # Archives only hold bytes, dict, str and int, none of which need a
    # global lookup. Anything that asks for one is rejected.
    def find_class(self, module, name):
        raise ArchiveError(f"archive references forbidden global {module}.{name}")


def read_text(input_path):
    """Read the whole file as one string; line endings become '\\n'."""
    with open(input_path, "r", encoding="utf-8") as f:
        return f.read()


def format_codes(codes, per_line=CODES_PER_LINE):
    """
    Render the code table as '(bits=token), ' pairs, breaking the line
    after every per_line pairs. Meant for people to read, not to parse back.
    """
    out = []
    count = 0
    for token, code in codes.items():
        out.append(f"({code}={token}), ")
        count += 1
        if count % per_line == 0:
            out.append("\n")
    return "".join(out)


def write_codes(codes, output_path):
    with open(output_path, "w", encoding="utf-8", newline="") as f:
        f.write(format_codes(codes))


def write_compressed(data, output_path):
    with open(output_path, "wb") as f:
        f.write(data)


def write_archive(data, codes, bit_length, output_path):
    """Save packed bytes together with the code table and exact bit length."""
    with open(output_path, "wb") as f:
        pickle.dump((data, dict(codes.items()), bit_length), f)


def read_archive(archive_path):
    with open(archive_path, "rb") as f:
        try:
            payload = _ArchiveUnpickler(io.BytesIO(f.read())).load()
        except ArchiveError:
            raise
        except (pickle.UnpicklingError, EOFError, ValueError, IndexError, KeyError) as e:
            raise ArchiveError(f"{archive_path} is not a valid archive: {e}") from e

    if not (isinstance(payload, tuple) and len(payload) == 3):
        raise ArchiveError(f"{archive_path} does not hold (data, codes, bit_length)")

    data, codes, bit_length = payload
    if not isinstance(data, (bytes, bytearray)) or not isinstance(codes, dict) or not isinstance(bit_length, int):
        raise ArchiveError(f"{archive_path} has malformed fields")
    for token, code in codes.items():
        if not isinstance(token, str) or not isinstance(code, str) or not code or set(code) - {"0", "1"}:
            raise ArchiveError(f"{archive_path} has an invalid code entry {token!r}={code!r}")
    if not 0 <= bit_length <= len(data) * 8:
        raise ArchiveError(f"{archive_path} declares {bit_length} bits for {len(data)} bytes")

    return bytes(data), codes, bit_length


def size_in_kb(num_bytes):
    return round(num_bytes / KILO, STATS_PRECISION)


def compression_ratio(uncompressed_kb, compressed_kb):
    """Percentage saved: 100 - (compressed / uncompressed * 100)."""
    if not uncompressed_kb:
        return 0.0
    return round(100 - (compressed_kb / uncompressed_kb * 100.0), STATS_PRECISION)


### COMPRESS_FILE FUNCTION ###
def compress_file(input_path, output_dir=".", capacity=TABLE_CAPACITY):
    """
    Compress a text file with word-level Huffman coding.

    Writes three files into output_dir:
      compressed.txt       the packed bitstream, no header
      codes.txt            the code table in readable form
      compressed.txt.huff  bytes + code table + bit length, for decompress_file

    Returns a dict of run statistics and output paths.
    """
    start = time.time()

    text = read_text(input_path)
    encoded = huffman_encoding(text, capacity)

    os.makedirs(output_dir, exist_ok=True)
    compressed_path = os.path.join(output_dir, COMPRESSED_FILENAME)
    codes_path = os.path.join(output_dir, CODES_FILENAME)
    archive_path = compressed_path + ARCHIVE_SUFFIX

    write_codes(encoded.codes, codes_path)
    write_compressed(encoded.data, compressed_path)
    write_archive(encoded.data, encoded.codes, encoded.bit_length, archive_path)

    encoded.frequency.stats()

    elapsed_ms = int((time.time() - start) * 1000)

    original_size = os.path.getsize(input_path)
    compressed_size = os.path.getsize(compressed_path)
    uncompressed_kb = size_in_kb(original_size)
    compressed_kb = size_in_kb(compressed_size)

    logger.info("Compressed '%s' -> '%s' in %d ms", input_path, compressed_path, elapsed_ms)

    return {
        "success": True,
        "elapsed_ms": elapsed_ms,
        "original_size": original_size,
        "compressed_size": compressed_size,
        "uncompressed_kb": uncompressed_kb,
        "compressed_kb": compressed_kb,
        "compression_ratio": compression_ratio(uncompressed_kb, compressed_kb),
        "token_count": len(encoded.tokens),
        "distinct_tokens": len(encoded.codes),
        "bit_length": encoded.bit_length,
        "padding_bits": encoded.padding,
        "compressed_path": compressed_path,
        "codes_path": codes_path,
        "archive_path": archive_path,
    }


### DECOMPRESS_FILE FUNCTION ###
def decompress_file(archive_path, output_path):
    """Restore the original text from an archive written by compress_file."""
    if not archive_path.endswith(ARCHIVE_SUFFIX):
        raise ArchiveError(f"input file must have the '{ARCHIVE_SUFFIX}' extension: {archive_path}")

    data, codes, bit_length = read_archive(archive_path)
    try:
        text = huffman_decoding(unpack_bits(data, bit_length), codes)
    except CodeTableError as e:
        raise ArchiveError(f"{archive_path} does not decode with its own code table: {e}") from e

    # Encode first so a bad token never leaves a half-written file behind
    try:
        payload = text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ArchiveError(f"{archive_path} holds text that is not valid UTF-8: {e}") from e

    with open(output_path, "wb") as f:
        f.write(payload)

    logger.info("Decompressed '%s' -> '%s'", archive_path, output_path)

    return {
        "success": True,
        "output_path": output_path,
        "bit_length": bit_length,
        "characters": len(text),
    }
