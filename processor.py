import logging
from typing import Callable, Dict, Optional, Tuple

from bitops import BitWriter, BitReader
from huffman import (
    BITS_PER_INT,
    BITS_PER_WORD,
    HUFF_TREE,
    PSEUDO_EOF,
    HuffmanNode,
    MalformedHeaderError,
    TruncatedPayloadError,
    build_tree,
    count_frequencies,
    make_codes,
    read_header,
    write_header,
)

logger = logging.getLogger(__name__)

DEBUG_LOW = 1
DEBUG_HIGH = 4

ProgressCallback = Callable[[int, int], None]


class HuffProcessor:
    """Huffman compressor/decompressor with a preorder tree header.

    Compressed layout: ``HUFF_TREE`` in 32 bits, the tree written by
    :func:`huffman.write_header`, then one code per input byte ending with
    the code of ``PSEUDO_EOF``.

    :ivar debug: Debug level; ``DEBUG_LOW`` logs per-phase bit counts,
        ``DEBUG_HIGH`` also logs every code.
    :type debug: int
    """

    def __init__(self, debug: int = 0):
        """Create a processor.

        :param debug: Debug level (0 disables tracing).
        :type debug: int
        :returns: None
        :rtype: None
        """
        self.debug = debug

    def compress(
        self,
        in_bits: BitReader,
        out_bits: BitWriter,
        on_progress: Optional[ProgressCallback] = None,
    ):
        """Compress everything readable from ``in_bits`` into ``out_bits``.

        The input is read twice: once to count symbols, then, after a
        ``reset()``, to encode them. ``out_bits`` is closed on return.

        :param in_bits: Source of 8-bit groups; must support ``reset()``.
        :type in_bits: BitReader
        :param out_bits: Destination bit stream.
        :type out_bits: BitWriter
        :param on_progress: Optional callback ``on_progress(done, total)``
                            reporting input bytes encoded so far.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: None
        :rtype: None
        """
        counts = count_frequencies(in_bits)
        root = build_tree(counts)
        codes = make_codes(root)
        if self.debug >= DEBUG_LOW:
            logger.debug(
                "read %d bits, %d distinct symbols, %d leaves",
                in_bits.bits_read,
                sum(1 for c in counts if c > 0),
                len(codes),
            )
        if self.debug >= DEBUG_HIGH:
            for symbol in sorted(codes):
                code, length = codes[symbol]
                logger.debug("symbol %d count %d code %s",
                             symbol, counts[symbol], format(code, f"0{length}b"))

        out_bits.write_bits(HUFF_TREE, BITS_PER_INT)
        write_header(root, out_bits)
        header_bits = out_bits.bits_written
        if self.debug >= DEBUG_LOW:
            logger.debug("wrote %d header bits", header_bits)

        in_bits.reset()
        self.write_compressed_bits(codes, in_bits, out_bits, on_progress)
        out_bits.close()
        if self.debug >= DEBUG_LOW:
            logger.debug("wrote %d payload bits, %d bits total",
                         out_bits.bits_written - header_bits,
                         out_bits.bits_written)

    @staticmethod
    def write_compressed_bits(
        codes: Dict[int, Tuple[int, int]],
        in_bits: BitReader,
        out_bits: BitWriter,
        on_progress: Optional[ProgressCallback] = None,
    ):
        """Write the code of every 8-bit group, then the sentinel's code.

        :param codes: Mapping from symbol to ``(code, length)``.
        :type codes: Dict[int, Tuple[int, int]]
        :param in_bits: Input positioned at its first bit.
        :type in_bits: BitReader
        :param out_bits: Destination bit stream.
        :type out_bits: BitWriter
        :param on_progress: Optional progress callback.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: None
        :rtype: None
        """
        total = in_bits.bits_left() // BITS_PER_WORD
        done = 0
        while True:
            try:
                value = in_bits.read_bits(BITS_PER_WORD)
            except EOFError:
                break
            code, length = codes[value]
            out_bits.write_bits(code, length)
            done += 1
            if on_progress is not None:
                on_progress(done, total)

        code, length = codes[PSEUDO_EOF]
        out_bits.write_bits(code, length)

    def decompress(
        self,
        in_bits: BitReader,
        out_bits: BitWriter,
        on_progress: Optional[ProgressCallback] = None,
    ):
        """Decompress a stream produced by :meth:`compress`.

        ``out_bits`` is closed whether or not decoding succeeds.

        :param in_bits: Compressed bit stream.
        :type in_bits: BitReader
        :param out_bits: Destination for the recovered bytes.
        :type out_bits: BitWriter
        :param on_progress: Optional callback ``on_progress(done, total)``
                            reporting compressed bytes consumed so far.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: None
        :rtype: None
        :raises MalformedHeaderError: If the magic number or tree is invalid.
        :raises TruncatedPayloadError: If the data ends before the sentinel.
        """
        try:
            try:
                magic = in_bits.read_bits(BITS_PER_INT)
            except EOFError as e:
                raise MalformedHeaderError("missing magic number") from e
            if magic != HUFF_TREE:
                raise MalformedHeaderError(f"illegal header starts with {magic:#x}")

            root = read_header(in_bits)
            header_bits = in_bits.bits_read
            if self.debug >= DEBUG_LOW:
                logger.debug("read %d header bits, %d leaves",
                             header_bits, len(root.leaves()))

            self.read_compressed_bits(root, in_bits, out_bits, on_progress)
            if self.debug >= DEBUG_LOW:
                logger.debug("read %d payload bits, wrote %d bits",
                             in_bits.bits_read - header_bits,
                             out_bits.bits_written)
        finally:
            out_bits.close()

    @staticmethod
    def read_compressed_bits(
        root: HuffmanNode,
        in_bits: BitReader,
        out_bits: BitWriter,
        on_progress: Optional[ProgressCallback] = None,
    ):
        """Walk the tree bit by bit, writing a byte at every non-sentinel leaf.

        :param root: Root of the tree read from the header.
        :type root: HuffmanNode
        :param in_bits: Bit stream positioned just past the header.
        :type in_bits: BitReader
        :param out_bits: Destination for the recovered bytes.
        :type out_bits: BitWriter
        :param on_progress: Optional progress callback.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: None
        :rtype: None
        :raises TruncatedPayloadError: If the data ends before the sentinel.
        """
        total = len(in_bits.data)
        current = root
        while True:
            try:
                bit = in_bits.read_bits(1)
            except EOFError as e:
                raise TruncatedPayloadError("bad input, no PSEUDO_EOF") from e
            current = current.right if bit else current.left

            if current.is_leaf:
                if current.symbol == PSEUDO_EOF:
                    break
                out_bits.write_bits(current.symbol, BITS_PER_WORD)
                current = root
                if on_progress is not None:
                    on_progress(in_bits.pos, total)

        if on_progress is not None:
            on_progress(total, total)

    def compress_bytes(
        self,
        data: bytes,
        on_progress: Optional[ProgressCallback] = None,
    ) -> bytes:
        """Compress raw ``data`` held in memory.

        :param data: Input bytes to compress.
        :type data: bytes
        :param on_progress: Optional callback ``on_progress(done, total)``.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: Compressed byte stream.
        :rtype: bytes
        """
        out_bits = BitWriter()
        self.compress(BitReader(data), out_bits, on_progress)
        return out_bits.flush()

    def decompress_bytes(
        self,
        data: bytes,
        on_progress: Optional[ProgressCallback] = None,
    ) -> bytes:
        """Decompress data produced by :meth:`compress_bytes`.

        :param data: Compressed byte stream.
        :type data: bytes
        :param on_progress: Optional callback ``on_progress(done, total)``.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: Original uncompressed bytes.
        :rtype: bytes
        :raises MalformedHeaderError: If the magic number or tree is invalid.
        :raises TruncatedPayloadError: If the data ends before the sentinel.
        """
        out_bits = BitWriter()
        self.decompress(BitReader(data), out_bits, on_progress)
        return out_bits.flush()
