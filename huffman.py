"""
Huffman codec with a self-describing tree header

Compressed layout:
  32 bits    HUFF_TREE magic
  tree       preorder; 0 = internal node, 1 + 9-bit symbol = leaf
  payload    code of every input byte, then the code of PSEUDO_EOF
"""

import heapq
import io
import sys
from typing import Dict, List

from bitio import BitInputStream, BitOutputStream

BITS_PER_WORD = 8
BITS_PER_INT = 32
ALPH_SIZE = 1 << BITS_PER_WORD
PSEUDO_EOF = ALPH_SIZE # terminator symbol, one past the byte range
HUFF_NUMBER = 0xFACE8200
HUFF_TREE = HUFF_NUMBER | 1

DEBUG_LOW = 1
DEBUG_HIGH = 4


class HuffException(ValueError):
    pass

class IllegalHeaderError(HuffException):
    def __init__(self, value, message=None):
        self.value = value
        super().__init__(message or f"illegal header starts with {value:#x}")

class TruncatedHeaderError(HuffException):
    pass

class TruncatedStreamError(HuffException):
    pass

class EmptyAlphabetError(HuffException):
    pass

class MissingCodeError(HuffException):
    def __init__(self, symbol):
        self.symbol = symbol
        super().__init__(f"no code for symbol {symbol}")


class HuffmanNode: # Node for Huffman tree
    def __init__(self, symbol, frequency, left=None, right=None):
        self.symbol = symbol    # byte, PSEUDO_EOF, or 0 for internal nodes
        self.frequency = frequency
        self.left = left
        self.right = right
        self.order = 0 # insertion rank in the priority queue, breaks weight ties

    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def __lt__(self, other):
        return (self.frequency, self.order) < (other.frequency, other.order)


def _debug(level, threshold, *args):
    if level >= threshold:
        print(*args, file=sys.stderr)


def make_counts(bit_in: BitInputStream) -> List[int]: # one pass over the input, 257 weights
    counts = [0] * (ALPH_SIZE + 1)
    while True:
        try:
            value = bit_in.read_bits(BITS_PER_WORD)
        except EOFError:
            break
        counts[value] += 1
    counts[PSEUDO_EOF] = 1
    return counts


def build_huffman_tree(counts) -> HuffmanNode: # counts: weight per symbol, indexed by symbol
    """
    Greedy merge of the two lightest nodes until one is left.
    Equal weights pop in insertion order: leaves by ascending symbol, then
    merged nodes in the order they were created.
    """
    priority_queue = []
    tick = 0
    for symbol, frequency in enumerate(counts):
        if frequency > 0:
            leaf = HuffmanNode(symbol, frequency)
            leaf.order = tick
            tick += 1
            priority_queue.append(leaf)

    if not priority_queue:
        raise EmptyAlphabetError("weight table has no symbol with positive weight")
    heapq.heapify(priority_queue)

    while len(priority_queue) > 1:
        left = heapq.heappop(priority_queue)
        right = heapq.heappop(priority_queue)
        merged_node = HuffmanNode(0, left.frequency + right.frequency, left, right)
        merged_node.order = tick
        tick += 1
        heapq.heappush(priority_queue, merged_node)

    return priority_queue[0] # root of the tree


def generate_huffman_codes(root: HuffmanNode) -> Dict[int, str]: # symbol -> path of '0'/'1'
    codes = {}
    def generate_codes_helper(node, current_code):
        if node.is_leaf():
            codes[node.symbol] = current_code # empty when the root is a leaf
            return
        generate_codes_helper(node.left, current_code + '0')
        generate_codes_helper(node.right, current_code + '1')

    generate_codes_helper(root, '')
    return codes


def write_tree(root: HuffmanNode, bit_out: BitOutputStream) -> None:
    if root.is_leaf():
        bit_out.write_bits(1, 1)
        bit_out.write_bits(BITS_PER_WORD + 1, root.symbol)
    else:
        bit_out.write_bits(1, 0)
        write_tree(root.left, bit_out)
        write_tree(root.right, bit_out)


def read_tree(bit_in: BitInputStream, depth: int = 0) -> HuffmanNode:
    # 257 leaves reach at most depth 256; deeper means the header never closes
    if depth > ALPH_SIZE:
        raise TruncatedHeaderError(f"tree header deeper than {ALPH_SIZE} levels, no complete tree")

    try:
        bit = bit_in.read_bits(1)
    except EOFError:
        raise TruncatedHeaderError("tree header ended before a node tag bit") from None

    if bit == 0:
        left = read_tree(bit_in, depth + 1)
        right = read_tree(bit_in, depth + 1)
        return HuffmanNode(0, 0, left, right)

    try:
        value = bit_in.read_bits(BITS_PER_WORD + 1)
    except EOFError:
        raise TruncatedHeaderError("tree header ended inside a leaf value") from None
    if value > PSEUDO_EOF:
        raise IllegalHeaderError(value, f"leaf value {value} is outside 0..{PSEUDO_EOF}")
    return HuffmanNode(value, 0)


def write_compressed_bits(codes: Dict[int, str], bit_in: BitInputStream, bit_out: BitOutputStream) -> None:
    def write_code(symbol):
        code = codes.get(symbol)
        if code is None:
            raise MissingCodeError(symbol)
        if code:
            bit_out.write_bits(len(code), int(code, 2))

    while True:
        try:
            value = bit_in.read_bits(BITS_PER_WORD)
        except EOFError:
            break
        write_code(value)
    write_code(PSEUDO_EOF)


def read_compressed_bits(root: HuffmanNode, bit_in: BitInputStream, bit_out: BitOutputStream) -> None:
    if root.is_leaf():
        # no bits select a leaf when it is the whole tree
        if root.symbol == PSEUDO_EOF:
            return
        raise TruncatedStreamError(f"tree is a single leaf {root.symbol}, no PSEUDO_EOF can follow")

    node = root
    while True:
        try:
            bit = bit_in.read_bits(1)
        except EOFError:
            raise TruncatedStreamError("bad input, no PSEUDO_EOF") from None
        node = node.right if bit == 1 else node.left

        if node.is_leaf():
            if node.symbol == PSEUDO_EOF:
                return
            bit_out.write_bits(BITS_PER_WORD, node.symbol)
            node = root


def compress(bit_in: BitInputStream, bit_out: BitOutputStream, debug: int = 0) -> None:
    """
    Compress everything readable from bit_in into bit_out.
    bit_in is read twice (counts, then codes) and must support reset().
    bit_out is closed on return, including when an error propagates.
    """
    with bit_out:
        counts = make_counts(bit_in)
        root = build_huffman_tree(counts)
        codes = generate_huffman_codes(root)

        for symbol, count in enumerate(counts):
            if count:
                _debug(debug, DEBUG_HIGH, f"count {symbol}\t{count}\t{codes[symbol]}")

        bit_out.write_bits(BITS_PER_INT, HUFF_TREE)
        write_tree(root, bit_out)
        header_bits = bit_out.bits_written
        bit_in.reset()
        write_compressed_bits(codes, bit_in, bit_out)

        _debug(debug, DEBUG_LOW, f"leaves {len(codes)}, header bits {header_bits}, "
                                 f"read {bit_in.bits_read} bits, wrote {bit_out.bits_written} bits")


def decompress(bit_in: BitInputStream, bit_out: BitOutputStream, debug: int = 0) -> None:
    """
    Inverse of compress(). bit_out is closed on return, including on error;
    the caller discards the partial output when an exception propagates.
    """
    with bit_out:
        try:
            bits = bit_in.read_bits(BITS_PER_INT)
        except EOFError:
            raise TruncatedHeaderError("input ended before the 32-bit magic number") from None
        if bits != HUFF_TREE:
            raise IllegalHeaderError(bits)

        root = read_tree(bit_in)
        for symbol, code in sorted(generate_huffman_codes(root).items()):
            _debug(debug, DEBUG_HIGH, f"code {symbol}\t{code}")
        read_compressed_bits(root, bit_in, bit_out)

        _debug(debug, DEBUG_LOW, f"read {bit_in.bits_read} bits, wrote {bit_out.bits_written} bits")


def compress_bytes(data: bytes, debug: int = 0) -> bytes:
    sink = io.BytesIO()
    compress(BitInputStream(io.BytesIO(data)), BitOutputStream(sink), debug)
    return sink.getvalue()


def decompress_bytes(blob: bytes, debug: int = 0) -> bytes:
    sink = io.BytesIO()
    decompress(BitInputStream(io.BytesIO(blob)), BitOutputStream(sink), debug)
    return sink.getvalue()
