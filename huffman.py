import heapq
from itertools import count
from typing import Dict, List, Tuple

from bitops import BitWriter, BitReader

BITS_PER_WORD = 8
BITS_PER_INT = 32
ALPH_SIZE = 1 << BITS_PER_WORD
PSEUDO_EOF = ALPH_SIZE  #: Sentinel symbol terminating the payload
HUFF_NUMBER = 0xFACE8200
HUFF_TREE = HUFF_NUMBER | 1  #: Magic value of a stream with a tree header
LEAF_SYMBOL_BITS = BITS_PER_WORD + 1
MAX_TREE_DEPTH = ALPH_SIZE  # 257 leaves cannot nest deeper than this


class HuffError(ValueError):
    """Base class for errors raised while decoding compressed data."""


class MalformedHeaderError(HuffError):
    """The magic number or the tree header could not be read."""


class TruncatedPayloadError(HuffError):
    """The payload ended before the sentinel code was seen."""


class HuffmanNode:
    """Node for a standard binary Huffman tree.

    :ivar symbol: The symbol (byte value or ``PSEUDO_EOF``) stored at a leaf; ``None`` for internal nodes.
    :type symbol: int | None
    :ivar weight: Weight of the subtree rooted at this node.
    :type weight: int
    :ivar left: Left child node.
    :type left: HuffmanNode | None
    :ivar right: Right child node.
    :type right: HuffmanNode | None
    """

    def __init__(self, symbol=None, weight=0, left=None, right=None):
        """Create a Huffman node.

        :param symbol: Symbol value for leaf nodes; ``None`` for internal nodes.
        :type symbol: int | None
        :param int weight: Weight associated with this node.
        :param left: Left child node, if any.
        :type left: HuffmanNode|None
        :param right: Right child node, if any.
        :type right: HuffmanNode|None
        :returns: None
        :rtype: None
        """
        self.symbol = symbol
        self.weight = weight
        self.left = left
        self.right = right

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def leaves(self) -> List[int]:
        """Symbols of all leaves under this node, left to right."""
        if self.is_leaf:
            return [self.symbol]
        return self.left.leaves() + self.right.leaves()


def count_frequencies(reader: BitReader) -> List[int]:
    """Count every 8-bit group of ``reader`` until the end of data.

    The sentinel always gets a count of one. The reader is left at its end.

    :param reader: Bit reader positioned at the start of the input.
    :type reader: BitReader
    :returns: Counts indexed by symbol, ``ALPH_SIZE + 1`` entries.
    :rtype: List[int]
    """
    freq = [0] * (ALPH_SIZE + 1)
    while True:
        try:
            value = reader.read_bits(BITS_PER_WORD)
        except EOFError:
            break
        freq[value] += 1
    freq[PSEUDO_EOF] = 1
    return freq


def build_tree(freq: List[int]) -> HuffmanNode:
    """Build a Huffman tree from a frequency table.

    Nodes of equal weight leave the heap in insertion order, so a given
    table always yields the same tree. A lone leaf is paired with a
    zero-weight leaf for byte 0 so that the root is never a leaf.

    :param freq: Counts indexed by symbol.
    :type freq: List[int]
    :returns: Root of the tree.
    :rtype: HuffmanNode
    """
    order = count()
    heap = [(weight, next(order), HuffmanNode(symbol=sym, weight=weight))
            for sym, weight in enumerate(freq) if weight > 0]
    if len(heap) == 1:
        filler = 0 if heap[0][2].symbol != 0 else PSEUDO_EOF
        heap.append((0, next(order), HuffmanNode(symbol=filler, weight=0)))
    heapq.heapify(heap)

    while len(heap) > 1:
        _, _, left = heapq.heappop(heap)
        _, _, right = heapq.heappop(heap)
        merged = HuffmanNode(weight=left.weight + right.weight, left=left, right=right)
        heapq.heappush(heap, (merged.weight, next(order), merged))

    return heap[0][2]


def make_codes(root: HuffmanNode) -> Dict[int, Tuple[int, int]]:
    """Derive the code of every leaf from its root-to-leaf path.

    :param root: Root of a Huffman tree.
    :type root: HuffmanNode
    :returns: Mapping from symbol to a tuple ``(code, length)``.
    :rtype: Dict[int, Tuple[int, int]]
    """
    codes = {}
    stack = [(root, 0, 0)]
    while stack:
        node, code, length = stack.pop()
        if node.is_leaf:
            codes[node.symbol] = (code, length)
        else:
            stack.append((node.right, (code << 1) | 1, length + 1))
            stack.append((node.left, code << 1, length + 1))
    return codes


def write_header(root: HuffmanNode, writer: BitWriter):
    """Serialize the tree in preorder.

    An internal node is written as a single 0 bit followed by its children;
    a leaf as a 1 bit followed by its symbol in ``LEAF_SYMBOL_BITS`` bits.

    :param root: Root of the tree to serialize.
    :type root: HuffmanNode
    :param writer: Destination bit writer.
    :type writer: BitWriter
    :returns: None
    :rtype: None
    """
    if root.is_leaf:
        writer.write_bits(1, 1)
        writer.write_bits(root.symbol, LEAF_SYMBOL_BITS)
    else:
        writer.write_bits(0, 1)
        write_header(root.left, writer)
        write_header(root.right, writer)


def read_header(reader: BitReader) -> HuffmanNode:
    """Rebuild a tree written by :func:`write_header`.

    Reading stops as soon as the tree is structurally complete.

    :param reader: Bit reader positioned at the first header bit.
    :type reader: BitReader
    :returns: Root of the reconstructed tree. Weights are not stored and read back as 0.
    :rtype: HuffmanNode
    :raises MalformedHeaderError: If the header is truncated, nests too deep,
        holds an out-of-range symbol or consists of a single leaf.
    """
    root = _read_node(reader, 0)
    if root.is_leaf:
        raise MalformedHeaderError("tree header holds a single leaf")
    return root


def _read_node(reader: BitReader, depth: int) -> HuffmanNode:
    if depth > MAX_TREE_DEPTH:
        raise MalformedHeaderError(f"tree header nests deeper than {MAX_TREE_DEPTH}")
    try:
        bit = reader.read_bits(1)
        if bit == 1:
            symbol = reader.read_bits(LEAF_SYMBOL_BITS)
    except EOFError as e:
        raise MalformedHeaderError("tree header ended prematurely") from e

    if bit == 0:
        left = _read_node(reader, depth + 1)
        right = _read_node(reader, depth + 1)
        return HuffmanNode(left=left, right=right)
    if symbol > PSEUDO_EOF:
        raise MalformedHeaderError(f"bad leaf symbol in tree header: {symbol}")
    return HuffmanNode(symbol=symbol)
