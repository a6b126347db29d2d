import heapq
import logging
from dataclasses import dataclass
from typing import List, Optional

from config import TABLE_CAPACITY
from hash_table import HashTable

logger = logging.getLogger(__name__)


class CodeTableError(AssertionError):
    """The code table and the token stream disagree. Always a bug, never retried."""


### TOKENIZER ###
def is_word_char(ch):
    """Letters, digits, hyphens and apostrophes join into one word token."""
    return ch.isalpha() or ch.isdecimal() or ch == "-" or ch == "'"


def tokenize(text):
    """
    Split text into tokens in a single pass.
    A token is either a maximal run of word characters or one
    non-word character (spaces, punctuation and newlines are tokens too).
    """
    tokens = []
    word = []

    for ch in text:
        if is_word_char(ch):
            word.append(ch)
            continue

        # A non-word character closes the current word
        if word:
            tokens.append("".join(word))
            word = []
        tokens.append(ch)

    if word:
        tokens.append("".join(word))

    return tokens


### FREQUENCY COUNTING ###
def count_frequencies(tokens, capacity=TABLE_CAPACITY):
    """Count how often each token occurs. Returns a HashTable of token -> count."""
    frequency = HashTable(capacity)
    for token in tokens:
        count = frequency.get(token)
        frequency.put(token, 1 if count is None else count + 1)
    return frequency


def merge_frequencies(*tables, capacity=TABLE_CAPACITY):
    """Sum several frequency tables (e.g. counted over separate chunks of a text)."""
    merged = HashTable(capacity)
    for table in tables:
        for token, count in table.items():
            merged.put(token, merged.get(token, 0) + count)
    return merged


### HUFFMAN NODE CLASS ###
class HuffmanNode:
    """Represents a node in the Huffman tree."""

    __slots__ = ("token", "freq", "order", "left", "right")

    def __init__(self, token=None, freq=0, order=0, left=None, right=None):
        # token: the word or character for a leaf, None for internal nodes
        self.token = token
        self.freq = freq
        # order: position at which the node entered the queue, breaks ties
        self.order = order
        self.left = left
        self.right = right

    def is_leaf(self):
        return self.left is None and self.right is None

    # heapq pops the lowest frequency first; equal frequencies pop in
    # the order the nodes were pushed
    def __lt__(self, other):
        return (self.freq, self.order) < (other.freq, other.order)

    def __repr__(self):
        if self.is_leaf():
            return f"HuffmanNode({self.token!r}, {self.freq})"
        return f"HuffmanNode(freq={self.freq}, children=({self.left.freq}, {self.right.freq}))"


### TREE AND CODE GENERATION ###
def build_huffman_tree(frequency) -> Optional[HuffmanNode]:
    """
    Build the Huffman tree by repeatedly merging the two lowest-frequency nodes.
    Leaves are seeded in the frequency table's slot order.
    Returns None for an empty table and the lone leaf for a single token.
    """
    priority_queue = []
    order = 0
    for token, freq in frequency.items():
        heapq.heappush(priority_queue, HuffmanNode(token=token, freq=freq, order=order))
        order += 1

    if not priority_queue:
        return None

    while len(priority_queue) > 1:
        left = heapq.heappop(priority_queue)
        right = heapq.heappop(priority_queue)

        parent = HuffmanNode(freq=left.freq + right.freq, order=order, left=left, right=right)
        order += 1
        heapq.heappush(priority_queue, parent)

    return priority_queue[0]


def generate_codes(root, capacity=TABLE_CAPACITY):
    """
    Walk the tree depth-first, appending '0' for left and '1' for right,
    and record the path to every leaf. Returns a HashTable of token -> code.

    A tree that is a single leaf gets the code '0' so that every
    occurrence still costs one bit.
    """
    codes = HashTable(capacity)
    if root is None:
        return codes

    if root.is_leaf():
        codes.put(root.token, "0")
        return codes

    def generate_codes_recursive(node, current_code):
        if node.is_leaf():
            codes.put(node.token, current_code)
            return
        generate_codes_recursive(node.left, current_code + "0")
        generate_codes_recursive(node.right, current_code + "1")

    generate_codes_recursive(root, "")
    return codes


### BIT ENCODING ###
def encode_tokens(tokens, codes):
    """Concatenate the code of every token, in text order, into one bit string."""
    buffer = []
    for token in tokens:
        code = codes.get(token)
        if code is None:
            raise CodeTableError(f"no code assigned to token {token!r}")
        buffer.append(code)
    return "".join(buffer)


def pack_bits(bits):
    """
    Pack a bit string into bytes, most significant bit first.
    The last byte is padded with zeros; returns (data, padding_bits).
    """
    data = bytearray()
    for i in range(0, len(bits), 8):
        data.append(int(bits[i:i + 8].ljust(8, "0"), 2))
    return bytes(data), -len(bits) % 8


def unpack_bits(data, bit_length=None):
    """Expand packed bytes back into a bit string, dropping padding when bit_length is given."""
    bits = "".join(format(byte, "08b") for byte in data)
    return bits if bit_length is None else bits[:bit_length]


### PIPELINE ###
@dataclass
class EncodedText:
    """Everything produced while compressing one text."""
    tokens: List[str]
    frequency: HashTable
    codes: HashTable
    bits: str
    data: bytes
    padding: int

    @property
    def bit_length(self):
        return len(self.bits)


def huffman_encoding(text, capacity=TABLE_CAPACITY):
    """Tokenize, count, build the tree, derive the codes and pack the bitstream."""
    tokens = tokenize(text)
    frequency = count_frequencies(tokens, capacity)
    root = build_huffman_tree(frequency)
    codes = generate_codes(root, capacity)
    bits = encode_tokens(tokens, codes)
    data, padding = pack_bits(bits)

    logger.debug(
        "Encoded %d tokens (%d distinct) into %d bits (%d padding)",
        len(tokens), len(frequency), len(bits), padding,
    )
    return EncodedText(tokens, frequency, codes, bits, data, padding)


### DECODING ###
def huffman_decoding(bits, codes):
    """
    Turn a bit string back into text using a token -> code mapping.
    Works because the codes are prefix-free: the first code matched is the token.
    """
    reverse = {code: token for token, code in codes.items()}
    longest = max((len(code) for code in reverse), default=0)

    decoded = []
    current_code = ""
    for bit in bits:
        current_code += bit
        if current_code in reverse:
            decoded.append(reverse[current_code])
            current_code = ""
        elif len(current_code) >= longest:
            raise CodeTableError(f"bit sequence {current_code!r} matches no code")

    if current_code:
        raise CodeTableError(f"bitstream ends inside a code: {current_code!r}")

    return "".join(decoded)
