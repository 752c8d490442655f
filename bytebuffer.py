import base64
from collections import Counter
from itertools import cycle
from typing import Generator, Iterator, List, Tuple, Union, overload

from errors import MalformedInputError, UnequalLengthError

BytesLike = Union[bytes, bytearray, memoryview, "Buffer"]


class Buffer:
    """
    An owned sequence of bytes.

    Transformations return a new Buffer. Only the padding operations (pad, pad_to_block, unpad) modify the
    Buffer in place, and they return the Buffer so that calls can be chained.

    >>> Buffer(b"YELLOW SUBMARINE").pad(20)
    Buffer(b'YELLOW SUBMARINE\\x04\\x04\\x04\\x04')
    >>> Buffer.from_hex("49276d206b696c6c696e6720796f757220627261696e206c696b65206120706f69736f6e6f7573206d757368726f6f6d").base64()
    'SSdtIGtpbGxpbmcgeW91ciBicmFpbiBsaWtlIGEgcG9pc29ub3VzIG11c2hyb29t'
    """
    data: bytearray

    def __init__(self, data: BytesLike = b""):
        self.data = bytearray(bytes(data))

    @classmethod
    def from_hex(cls, text: str) -> "Buffer":
        return cls(bytes.fromhex(text))

    @classmethod
    def from_base64(cls, text: str) -> "Buffer":
        return cls(base64.b64decode(text.encode()))

    def hex(self) -> str:
        return self.data.hex()

    def base64(self) -> str:
        return base64.b64encode(self.data).decode()

    def __bytes__(self) -> bytes:
        return bytes(self.data)

    def __len__(self) -> int:
        return len(self.data)

    def __iter__(self) -> Iterator[int]:
        return iter(self.data)

    @overload
    def __getitem__(self, index: int) -> int: ...

    @overload
    def __getitem__(self, index: slice) -> "Buffer": ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Buffer(self.data[index])
        return self.data[index]

    def __eq__(self, other) -> bool:
        if isinstance(other, Buffer):
            return self.data == other.data
        if isinstance(other, (bytes, bytearray, memoryview)):
            return self.data == bytes(other)
        return NotImplemented

    def __add__(self, other: BytesLike) -> "Buffer":
        return Buffer(self.data + bytes(other))

    def __repr__(self) -> str:
        return f"Buffer({bytes(self.data)!r})"

    def xor(self, key: BytesLike) -> "Buffer":
        """
        Cycle the key and XOR it over the buffer

        >>> plaintext = Buffer(b"Burning 'em, if you ain't quick and nimble\\nI go crazy when I hear a cymbal")
        >>> plaintext.xor(b"ICE").hex()
        '0b3637272a2b2e63622c2e69692a23693a2a3c6324202d623d63343c2a26226324272765272a282b2f20430a652e2c652a3124333a653e2b2027630c692b20283165286326302e27282f'
        >>> Buffer(b"AAAA").xor(b"")
        Traceback (most recent call last):
        errors.MalformedInputError: XOR key must be non-empty
        """
        key = bytes(key)
        if not key:
            raise MalformedInputError("XOR key must be non-empty")
        return Buffer(bytes(a ^ b for a, b in zip(self.data, cycle(key))))

    def fixed_xor(self, other: BytesLike) -> "Buffer":
        """
        XOR against another operand of exactly the same length

        >>> arg1 = Buffer.from_hex('1c0111001f010100061a024b53535009181c')
        >>> arg1.fixed_xor(bytes.fromhex('686974207468652062756c6c277320657965')).hex()
        '746865206b696420646f6e277420706c6179'
        >>> Buffer(b"AAAA").fixed_xor(b"AAA")
        Traceback (most recent call last):
        errors.UnequalLengthError: Arguments are of different length
        """
        other = bytes(other)
        if len(self.data) != len(other):
            raise UnequalLengthError("Arguments are of different length")
        return Buffer(bytes(a ^ b for a, b in zip(self.data, other)))

    def pad(self, buffer_size: int) -> "Buffer":
        """
        Pad up to buffer_size with bytes whose value is the number of bytes added. Does nothing if the buffer is
        already at least buffer_size long

        >>> Buffer(b"YELLOW SUBMARINE").pad(17)
        Buffer(b'YELLOW SUBMARINE\\x01')
        >>> Buffer(b"YELLOW SUBMARINE").pad(16)
        Buffer(b'YELLOW SUBMARINE')
        >>> Buffer(b"A").pad(300)
        Traceback (most recent call last):
        errors.MalformedInputError: Cannot pad with 299 bytes
        """
        num_padding_bytes = buffer_size - len(self.data)
        if num_padding_bytes <= 0:
            return self
        if num_padding_bytes > 0xff:
            raise MalformedInputError(f"Cannot pad with {num_padding_bytes} bytes")
        self.data.extend([num_padding_bytes] * num_padding_bytes)
        return self

    def pad_to_block(self, block_size: int) -> "Buffer":
        """
        PKCS#7 pad to the next multiple of block_size. A block-aligned buffer gets a whole block of padding

        >>> len(Buffer(b"YELLOW SUBMARINE").pad_to_block(16))
        32
        >>> len(Buffer(b"YELLOW").pad_to_block(16))
        16
        """
        return self.pad(len(self.data) + block_size - len(self.data) % block_size)

    def _padding_length(self) -> int:
        if not self.data:
            return 0
        last = self.data[-1]
        run = 0
        for b in reversed(self.data):
            if b != last or run == last:
                break
            run += 1
        return last if run == last else 0

    def has_valid_padding(self) -> bool:
        """
        >>> Buffer(b"Hello, world!\\x02\\x02").has_valid_padding()
        True
        >>> Buffer(b"Hello, world!\\x02").has_valid_padding()
        False
        """
        return self._padding_length() > 0

    def unpad(self) -> "Buffer":
        """
        Strip PKCS#7 padding in place. A buffer without valid padding is left alone. There is no check that the
        padding is the only thing that could have produced the trailing run

        >>> Buffer(b"Hello, world!\\x02\\x02").unpad()
        Buffer(b'Hello, world!')
        >>> Buffer(b"Hello, world!\\x03\\x03").unpad()
        Buffer(b'Hello, world!\\x03\\x03')
        >>> Buffer(b"Hello, world\\x01").unpad()
        Buffer(b'Hello, world')
        """
        padding_length = self._padding_length()
        if padding_length:
            del self.data[-padding_length:]
        return self

    def hamming_distance(self, other: BytesLike) -> int:
        """
        Return the number of bits that must be changed to get other

        >>> Buffer(b"HELLO").hamming_distance(b"JELLO")
        1
        >>> Buffer(b"AAAAA").hamming_distance(b"JJJJA")
        12
        >>> Buffer(b"this is a test").hamming_distance(b"wokka wokka!!!")
        37
        >>> Buffer(b"AAAA").hamming_distance(b"AAA")
        Traceback (most recent call last):
        errors.UnequalLengthError: Inputs are of different length
        """
        other = bytes(other)
        if len(self.data) != len(other):
            raise UnequalLengthError("Inputs are of different length")
        return sum(bin(a ^ b).count("1") for a, b in zip(self.data, other))

    def chunks(self, chunk_size: int) -> Generator[bytes, None, None]:
        """
        Yield chunk_size sized chunks. The last one may be short

        >>> list(Buffer(b"ABCDE").chunks(2))
        [b'AB', b'CD', b'E']
        """
        for i in range(0, len(self.data), chunk_size):
            yield bytes(self.data[i:i + chunk_size])

    def gliding_pairs(self, chunk_size: int) -> Generator[Tuple[bytes, bytes], None, None]:
        """
        Yield each pair of neighbouring whole chunks

        >>> list(Buffer(b"ABCDEFG").gliding_pairs(2))
        [(b'AB', b'CD'), (b'CD', b'EF')]
        """
        whole = [c for c in self.chunks(chunk_size) if len(c) == chunk_size]
        yield from zip(whole, whole[1:])

    def transpose(self, block_count: int) -> List["Buffer"]:
        """
        Split into block_count columns, column i holding every byte whose index is i modulo block_count

        >>> Buffer(b"ABCDEFG").transpose(3)
        [Buffer(b'ADG'), Buffer(b'BE'), Buffer(b'CF')]
        >>> len(Buffer(b"AB").transpose(5))
        2
        """
        if block_count < 1:
            raise MalformedInputError("block_count must be at least 1")
        block_count = min(block_count, len(self.data))
        return [Buffer(self.data[i::block_count]) for i in range(block_count)]

    def count_identical_runs(self, run_length: int) -> int:
        """
        Count the pairs of run_length sized windows (at any offset, overlapping or not) that are identical

        >>> Buffer(b"ABCABC").count_identical_runs(3)
        1
        >>> Buffer(b"A" * 5).count_identical_runs(2)
        6
        >>> Buffer(b"AAA").count_identical_runs(3)
        0
        """
        if run_length < 1 or run_length >= len(self.data):
            return 0
        windows = Counter(bytes(self.data[i:i + run_length]) for i in range(len(self.data) - run_length + 1))
        return sum(n * (n - 1) // 2 for n in windows.values())
