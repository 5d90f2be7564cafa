class BitWriter:
    """Bit-packing writer.

    Accumulates individual bits into bytes and buffers them until
    flushed or closed.

    :ivar buffer: Internal byte buffer holding fully written bytes.
    :type buffer: bytearray
    :ivar bit_buffer: 8-bit scratch register for accumulating pending bits.
    :type bit_buffer: int
    :ivar bit_count: Number of valid bits currently stored in ``bit_buffer`` (0-7).
    :type bit_count: int
    :ivar bits_written: Total number of bits written, padding excluded.
    :type bits_written: int
    :ivar sink: Optional binary file-like object receiving the bytes on close.
    """

    def __init__(self, sink=None):
        """Initialize an empty bit writer.

        :param sink: Binary file-like object that receives the packed bytes
                     when the writer is closed. ``None`` keeps them in memory.
        :returns: None
        :rtype: None
        """
        self.buffer = bytearray()
        self.bit_buffer = 0
        self.bit_count = 0
        self.bits_written = 0
        self.sink = sink
        self.closed = False

    def write_bits(self, value: int, nbits: int):
        """Write the lowest ``nbits`` of ``value`` to the buffer, MSB first.

        :param value: Integer whose bits will be written.
        :type value: int
        :param nbits: Number of bits from ``value`` to write (0-32 typical).
        :type nbits: int
        :returns: None
        :rtype: None
        :raises ValueError: If the writer has already been closed.
        """
        if self.closed:
            raise ValueError("write to a closed BitWriter")
        for i in range(nbits - 1, -1, -1):
            self.bit_buffer = (self.bit_buffer << 1) | ((value >> i) & 1)
            self.bit_count += 1
            if self.bit_count == 8:
                self.buffer.append(self.bit_buffer)
                self.bit_buffer = 0
                self.bit_count = 0
        self.bits_written += nbits

    def flush(self) -> bytes:
        """Flush remaining bits (if any) and return the full byte buffer.

        Any partial byte in ``bit_buffer`` is padded with zeros to complete the
        byte before being appended.

        :returns: The accumulated bytes written so far.
        :rtype: bytes
        """
        if self.bit_count > 0:
            self.bit_buffer <<= (8 - self.bit_count)
            self.buffer.append(self.bit_buffer)
            self.bit_buffer = 0
            self.bit_count = 0
        return bytes(self.buffer)

    def close(self) -> bytes:
        """Flush trailing bits and hand the bytes over to ``sink``.

        Closing an already closed writer only returns the buffered bytes.

        :returns: Every byte written through this writer.
        :rtype: bytes
        """
        data = self.flush()
        if not self.closed:
            self.closed = True
            if self.sink is not None:
                self.sink.write(data)
                self.sink.flush()
        return data


class BitReader:
    """Bit-packing reader.

    Reads arbitrary bit lengths from a bytes-like object and can be
    rewound for another pass over the same data.

    :ivar data: Input data to read bits from.
    :type data: bytes
    :ivar pos: Current position in ``data`` (byte index).
    :type pos: int
    :ivar bit_buffer: Scratch register holding the current source byte.
    :type bit_buffer: int
    :ivar bit_count: Number of unread bits remaining in ``bit_buffer`` (0-8).
    :type bit_count: int
    :ivar bits_read: Bits consumed since construction or the last reset.
    :type bits_read: int
    """

    def __init__(self, data: bytes):
        """Create a bit reader for the given input ``data``.

        :param data: Source data to read from.
        :type data: bytes
        :returns: None
        :rtype: None
        """
        self.data = data
        self.reset()

    def reset(self):
        """Rewind the reader to the first bit of ``data``.

        :returns: None
        :rtype: None
        """
        self.pos = 0
        self.bit_buffer = 0
        self.bit_count = 0
        self.bits_read = 0

    def bits_left(self) -> int:
        """Number of bits that can still be read."""
        return self.bit_count + 8 * (len(self.data) - self.pos)

    def read_bits(self, nbits: int) -> int:
        """Read ``nbits`` bits from the stream and return them as an integer.

        Bits are returned MSB-first in the integer. When fewer than ``nbits``
        bits remain nothing is consumed.

        :param nbits: Number of bits to read.
        :type nbits: int
        :returns: The integer value composed of the next ``nbits`` bits.
        :rtype: int
        :raises EOFError: If the end of data is reached before reading ``nbits``.
        """
        if nbits > self.bits_left():
            raise EOFError("Unexpected end of data")
        result = 0
        for _ in range(nbits):
            if self.bit_count == 0:
                self.bit_buffer = self.data[self.pos]
                self.pos += 1
                self.bit_count = 8
            result = (result << 1) | ((self.bit_buffer >> (self.bit_count - 1)) & 1)
            self.bit_count -= 1
        self.bits_read += nbits
        return result
