import os

# -----------------------------------------------------------
# TABLE CONFIGURATION
# -----------------------------------------------------------
# Both the frequency table and the code table are allocated with this
# many slots. They never grow.
TABLE_CAPACITY = int(os.environ.get("HUFFMAN_TABLE_CAPACITY", 32768))

# -----------------------------------------------------------
# OUTPUT CONFIGURATION
# -----------------------------------------------------------
CODES_FILENAME = "codes.txt"
COMPRESSED_FILENAME = "compressed.txt"
ARCHIVE_SUFFIX = ".huff"
CODES_PER_LINE = 5

# Statistics are reported in kilobytes, rounded to this many places
KILO = 1024.0
STATS_PRECISION = 4

DEFAULT_INPUT = os.environ.get("HUFFMAN_INPUT", "WarAndPeace.txt")

# -----------------------------------------------------------
# PATH CONFIGURATION
# -----------------------------------------------------------
BASE_DIR = os.path.abspath(os.path.dirname(__file__))
DATA_DIR = os.environ.get("HUFFMAN_DATA_DIR", os.path.join(BASE_DIR, "data"))
UPLOAD_DIR = os.path.join(DATA_DIR, "uploads")

MAX_UPLOAD_BYTES = int(os.environ.get("HUFFMAN_MAX_UPLOAD_BYTES", 16 * 1024 * 1024))

LOG_LEVEL = os.environ.get("HUFFMAN_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
