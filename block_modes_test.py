import pytest
from secrets import token_bytes

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from block_modes import cbc_decrypt, cbc_encrypt, decrypt_block, ecb_decrypt, ecb_encrypt, encrypt_block
from bytebuffer import Buffer
from errors import MalformedInputError, UnequalLengthError


class TestBlockPrimitive:
    """Test suite for the single block AES primitive"""

    def test_round_trip(self):
        key, block = token_bytes(16), token_bytes(16)
        assert decrypt_block(key, encrypt_block(key, block)) == block

    def test_matches_library_ecb(self):
        key, block = token_bytes(16), token_bytes(16)
        encryptor = Cipher(algorithms.AES128(key), modes.ECB()).encryptor()
        assert encrypt_block(key, block) == encryptor.update(block) + encryptor.finalize()

    def test_bad_key(self):
        with pytest.raises(ValueError):
            encrypt_block(b"too short", bytes(16))

    def test_bad_block(self):
        with pytest.raises(MalformedInputError):
            decrypt_block(token_bytes(16), bytes(17))


class TestCbc:
    """Test suite for CBC built on the block primitive"""

    @pytest.mark.parametrize("length", [1, 15, 16, 17, 48, 100])
    def test_round_trip(self, length):
        """Test that decrypt gives back the padded plaintext"""
        key, iv = token_bytes(16), token_bytes(16)
        plaintext = token_bytes(length)
        padded = Buffer(plaintext).pad(-(-length // 16) * 16)
        ciphertext = cbc_encrypt(plaintext, key, iv)
        assert len(ciphertext) % 16 == 0
        assert cbc_decrypt(ciphertext, key, iv) == bytes(padded)

    def test_matches_library_cbc(self):
        key, iv = token_bytes(16), token_bytes(16)
        plaintext = token_bytes(64)
        encryptor = Cipher(algorithms.AES128(key), modes.CBC(iv)).encryptor()
        expected = encryptor.update(plaintext) + encryptor.finalize()
        assert cbc_encrypt(plaintext, key, iv) == expected

    def test_no_extra_block_when_aligned(self):
        assert len(cbc_encrypt(bytes(32), token_bytes(16), token_bytes(16))) == 32

    def test_decrypt_does_not_unpad(self):
        key, iv = token_bytes(16), token_bytes(16)
        padded = bytes(Buffer(b"YELLOW").pad_to_block(16))
        assert cbc_decrypt(cbc_encrypt(padded, key, iv), key, iv) == padded

    def test_identical_blocks_differ(self):
        ciphertext = cbc_encrypt(b"A" * 64, token_bytes(16), token_bytes(16))
        blocks = list(Buffer(ciphertext).chunks(16))
        assert len(set(blocks)) == 4

    def test_chains_previous_ciphertext_on_decrypt(self):
        """Test that a flipped ciphertext bit shows up at the same place in the next plaintext block"""
        key, iv = token_bytes(16), token_bytes(16)
        plaintext = b"A" * 32
        ciphertext = bytearray(cbc_encrypt(plaintext, key, iv))
        ciphertext[3] ^= 0x01
        decrypted = cbc_decrypt(bytes(ciphertext), key, iv)
        assert decrypted[16:] == b"AAA@" + b"A" * 12

    def test_misaligned_ciphertext(self):
        with pytest.raises(MalformedInputError):
            cbc_decrypt(bytes(17), token_bytes(16), token_bytes(16))

    def test_bad_iv(self):
        with pytest.raises(UnequalLengthError):
            cbc_decrypt(bytes(16), token_bytes(16), b"short")


class TestEcb:
    """Test suite for ECB built on the block primitive"""

    def test_round_trip(self):
        key = token_bytes(16)
        plaintext = b"Beware of hazardous materials"
        assert Buffer(ecb_decrypt(ecb_encrypt(plaintext, key), key)).unpad() == plaintext

    def test_matches_library_ecb(self):
        key = token_bytes(16)
        plaintext = token_bytes(48)
        encryptor = Cipher(algorithms.AES128(key), modes.ECB()).encryptor()
        expected = encryptor.update(plaintext) + encryptor.finalize()
        assert ecb_encrypt(plaintext, key)[:48] == expected
