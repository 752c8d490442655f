import pytest
from secrets import token_bytes

from bytebuffer import Buffer
from errors import MalformedInputError, UnequalLengthError


class TestBufferConstruction:
    """Test suite for building and rendering Buffers"""

    def test_hex_round_trip(self):
        """Test hex in, hex out"""
        assert Buffer.from_hex("deadbeef").hex() == "deadbeef"

    def test_base64_round_trip(self):
        """Test base64 in, base64 out"""
        assert Buffer.from_base64("SGVsbG8=") == b"Hello"
        assert Buffer(b"Hello").base64() == "SGVsbG8="

    def test_slice_is_new_buffer(self):
        """Test slicing returns an independent Buffer"""
        buf = Buffer(b"ABCDEF")
        part = buf[1:3]
        assert isinstance(part, Buffer)
        assert part == b"BC"
        part.pad(4)
        assert buf == b"ABCDEF"

    def test_index_is_int(self):
        assert Buffer(b"A")[0] == 0x41


class TestXor:
    """Test suite for repeating-key and fixed XOR"""

    @pytest.mark.parametrize("key", [b"K", b"ICE", b"a much longer key than the data"])
    def test_xor_is_self_inverse(self, key):
        """Test that XORing twice with the same key gives back the input"""
        buf = Buffer(token_bytes(50))
        assert buf.xor(key).xor(key) == buf

    def test_xor_keeps_length(self):
        assert len(Buffer(b"A" * 10).xor(b"BCD")) == 10

    def test_xor_returns_new_buffer(self):
        buf = Buffer(b"AAAA")
        buf.xor(b"B")
        assert buf == b"AAAA"

    def test_empty_key(self):
        with pytest.raises(MalformedInputError):
            Buffer(b"AAAA").xor(b"")

    def test_fixed_xor_unequal(self):
        with pytest.raises(UnequalLengthError):
            Buffer(b"AAAA").fixed_xor(b"AAAAA")


class TestPadding:
    """Test suite for PKCS#7 style padding"""

    @pytest.mark.parametrize("length, target", [(0, 1), (5, 16), (15, 16), (16, 32), (3, 258)])
    def test_pad_unpad_round_trip(self, length, target):
        """Test that pad followed by unpad recovers the original"""
        original = token_bytes(length)
        buf = Buffer(original).pad(target)
        assert len(buf) == target
        assert buf.unpad() == original

    def test_round_trip_when_data_ends_like_padding(self):
        """Test that trailing bytes which look like padding survive a round trip"""
        buf = Buffer(b"AB\x02").pad(5)
        assert buf == b"AB\x02\x02\x02"
        assert buf.unpad() == b"AB\x02"

    def test_pad_no_op_when_long_enough(self):
        assert Buffer(b"ABCD").pad(2) == b"ABCD"

    def test_pad_too_much(self):
        with pytest.raises(MalformedInputError):
            Buffer(b"").pad(256)

    def test_pad_is_in_place(self):
        buf = Buffer(b"AB")
        buf.pad(4)
        assert buf == b"AB\x02\x02"

    def test_unpad_accidental_run(self):
        """Test that data which happens to end in valid padding is truncated"""
        assert Buffer(b"ABC\x01").unpad() == b"ABC"
        assert Buffer(b"AB\x02\x02").unpad() == b"AB"

    def test_unpad_invalid_is_left_alone(self):
        assert Buffer(b"ABC\x03\x03").unpad() == b"ABC\x03\x03"
        assert Buffer(b"ABC\x00").unpad() == b"ABC\x00"
        assert Buffer(b"").unpad() == b""

    def test_pad_to_block_adds_whole_block(self):
        assert Buffer(b"A" * 16).pad_to_block(16) == b"A" * 16 + b"\x10" * 16


class TestHammingDistance:
    """Test suite for bitwise hamming distance"""

    def test_canonical_fixture(self):
        assert Buffer(b"this is a test").hamming_distance(b"wokka wokka!!!") == 37

    def test_symmetric(self):
        a, b = token_bytes(32), token_bytes(32)
        assert Buffer(a).hamming_distance(b) == Buffer(b).hamming_distance(a)

    def test_zero_iff_identical(self):
        a = token_bytes(32)
        assert Buffer(a).hamming_distance(a) == 0
        flipped = bytes([a[0] ^ 0x80]) + a[1:]
        assert Buffer(a).hamming_distance(flipped) == 1

    def test_unequal_length(self):
        with pytest.raises(UnequalLengthError):
            Buffer(b"AAAA").hamming_distance(b"AAA")


class TestTranspose:
    """Test suite for transposing into columns"""

    def test_columns(self):
        assert Buffer(b"ABCDEF").transpose(2) == [Buffer(b"ACE"), Buffer(b"BDF")]

    def test_interleaving_columns_gives_back_input(self):
        data = token_bytes(37)
        columns = Buffer(data).transpose(5)
        rebuilt = bytearray(len(data))
        for i, column in enumerate(columns):
            rebuilt[i::5] = bytes(column)
        assert bytes(rebuilt) == data

    def test_clamped_to_length(self):
        assert len(Buffer(b"ABC").transpose(10)) == 3

    def test_zero_columns(self):
        with pytest.raises(MalformedInputError):
            Buffer(b"ABC").transpose(0)


class TestCountIdenticalRuns:
    """Test suite for repeated window detection"""

    def test_repeated_blocks(self):
        block = token_bytes(16)
        assert Buffer(block * 4).count_identical_runs(16) > 3

    def test_random_data(self):
        assert Buffer(token_bytes(160)).count_identical_runs(16) == 0

    @pytest.mark.parametrize("run_length", [3, 4, 100])
    def test_run_not_shorter_than_buffer(self, run_length):
        assert Buffer(b"AAA").count_identical_runs(run_length) == 0
