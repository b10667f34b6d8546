"""
Bit-level reader/writer over binary file objects

Bits are packed most-significant-first into bytes; the writer pads the last
partial byte with zero bits when it is closed
"""

from typing import BinaryIO, Optional

BITS_PER_BYTE = 8


class BitInputStream: # reads an arbitrary number of bits at a time
    def __init__(self, fileobj: BinaryIO, owns: bool = False):
        self.fileobj = fileobj
        self.owns = owns # close the file object together with the stream
        self.buffer = 0 # bits not yet handed out, right-aligned
        self.buffer_bits = 0
        self.bits_read = 0

    @classmethod
    def open(cls, path) -> "BitInputStream":
        return cls(open(path, "rb"), owns=True)

    def read_bits(self, count: int) -> int:
        """
        Return the next `count` bits as an unsigned int, MSB first
        Raises EOFError if fewer than `count` bits remain
        """
        while self.buffer_bits < count:
            chunk = self.fileobj.read(1)
            if not chunk:
                raise EOFError(f"wanted {count} bits, only {self.buffer_bits} left")
            self.buffer = (self.buffer << BITS_PER_BYTE) | chunk[0]
            self.buffer_bits += BITS_PER_BYTE

        self.buffer_bits -= count
        value = (self.buffer >> self.buffer_bits) & ((1 << count) - 1)
        self.buffer &= (1 << self.buffer_bits) - 1
        self.bits_read += count
        return value

    def reset(self) -> None:
        # the encoder pass must start again from the first byte
        if not self.fileobj.seekable():
            raise OSError("bit input stream cannot be rewound: source is not seekable")
        self.fileobj.seek(0)
        self.buffer = 0
        self.buffer_bits = 0
        self.bits_read = 0

    def close(self) -> None:
        if self.owns:
            self.fileobj.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class BitOutputStream: # writes an arbitrary number of bits at a time
    def __init__(self, fileobj: BinaryIO, owns: bool = False):
        self.fileobj = fileobj
        self.owns = owns
        self.acc = 0 # pending bits, right-aligned
        self.acc_bits = 0
        self.bits_written = 0
        self.closed = False

    @classmethod
    def open(cls, path) -> "BitOutputStream":
        return cls(open(path, "wb"), owns=True)

    def write_bits(self, count: int, value: int) -> None:
        """
        Append the low `count` bits of value, MSB first
        """
        if self.closed:
            raise ValueError("write to closed bit output stream")
        if count == 0:
            return
        self.acc = (self.acc << count) | (value & ((1 << count) - 1))
        self.acc_bits += count
        self.bits_written += count

        out = bytearray()
        while self.acc_bits >= BITS_PER_BYTE:
            self.acc_bits -= BITS_PER_BYTE
            out.append((self.acc >> self.acc_bits) & 0xFF)
        self.acc &= (1 << self.acc_bits) - 1
        if out:
            self.fileobj.write(bytes(out))

    def _flush_padded(self) -> None:
        # pad the partial byte with zeros
        if self.acc_bits:
            pad_bits = BITS_PER_BYTE - self.acc_bits
            self.fileobj.write(bytes([(self.acc << pad_bits) & 0xFF]))
            self.acc = 0
            self.acc_bits = 0
        self.fileobj.flush()

    def close(self) -> None:
        if self.closed:
            return
        try:
            self._flush_padded()
        finally:
            self.closed = True
            if self.owns:
                self.fileobj.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.close()
        return False
