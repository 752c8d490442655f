import pytest
from secrets import token_bytes

from block_modes import BlockCipherMode
from ecb_oracle_attack import (AppendingEcbOracle, ModeOracle, detect_oracle_mode, discover_block_size,
                               identify_ecb_ciphertexts, interrogate_oracle, is_ecb_ciphertext,
                               leak_appended_secret, recover_byte)
from errors import OracleMisuseError
from references import CryptReferences

SECRET = b"Rollin' in my 5.0\nWith my rag-top down so my hair can blow\n"


def make_oracle(secret: bytes = SECRET, junk: int = 0) -> AppendingEcbOracle:
    return AppendingEcbOracle(prepended_junk_minmax=(junk, junk)).initialise(CryptReferences.generate(secret))


class TestModeDetection:
    """Test suite for telling ECB from CBC"""

    def test_same_plaintext_and_key(self):
        key, iv = token_bytes(16), token_bytes(16)
        plaintext = b"A" * 16 * 4
        assert is_ecb_ciphertext(ModeOracle(BlockCipherMode.ECB, key=key, iv=iv).encrypt(plaintext))
        assert not is_ecb_ciphertext(ModeOracle(BlockCipherMode.CBC, key=key, iv=iv).encrypt(plaintext))

    @pytest.mark.parametrize("mode", [BlockCipherMode.ECB, BlockCipherMode.CBC])
    def test_bookended_oracle(self, mode):
        oracle = ModeOracle(mode, bookend=True)
        for _ in range(10):
            assert detect_oracle_mode(oracle.encrypt) is mode

    def test_identify_ecb_ciphertexts(self):
        ecb = ModeOracle(BlockCipherMode.ECB).encrypt(b"A" * 64)
        cbc = ModeOracle(BlockCipherMode.CBC).encrypt(b"A" * 64)
        assert identify_ecb_ciphertexts([cbc, ecb, token_bytes(80)]) == [ecb]


class TestInterrogation:
    """Test suite for learning about an appending oracle"""

    @pytest.mark.parametrize("length", [0, 1, 15, 16, 17, 40])
    def test_block_size_and_suffix_length(self, length):
        assert discover_block_size(make_oracle(secret=b"S" * length).encrypt) == (16, length)

    @pytest.mark.parametrize("junk", [0, 1, 15, 16, 33])
    def test_junk_length(self, junk):
        interrogation = interrogate_oracle(make_oracle(junk=junk).encrypt)
        assert interrogation.block_size == 16
        assert interrogation.junk_length == junk
        assert interrogation.suffix_length == len(SECRET)


class TestByteAtATime:
    """Test suite for leaking the appended secret"""

    def test_leaks_secret(self):
        assert leak_appended_secret(make_oracle().encrypt) == SECRET

    @pytest.mark.parametrize("junk", [3, 16, 21])
    def test_leaks_secret_past_junk(self, junk):
        assert leak_appended_secret(make_oracle(junk=junk).encrypt) == SECRET

    @pytest.mark.parametrize("length", [1, 15, 16, 17])
    def test_stops_at_secret_length(self, length):
        secret = token_bytes(length)
        assert leak_appended_secret(make_oracle(secret=secret).encrypt) == secret

    def test_search_exhausted_past_padding(self):
        """Test that once past the padding byte, no guess matches"""
        oracle = make_oracle()
        interrogation = interrogate_oracle(oracle.encrypt)
        # The byte after the secret is the first byte of padding
        assert recover_byte(oracle.encrypt, interrogation, SECRET) == 0x01
        assert recover_byte(oracle.encrypt, interrogation, SECRET + b"\x01") is None

    def test_cbc_oracle_refused(self):
        with pytest.raises(ValueError):
            leak_appended_secret(ModeOracle(BlockCipherMode.CBC).encrypt)


class TestOracleLifecycle:
    """Test suite for oracle initialisation"""

    def test_uninitialised(self):
        with pytest.raises(OracleMisuseError):
            AppendingEcbOracle().encrypt(b"A")

    def test_initialised_twice(self):
        oracle = make_oracle()
        with pytest.raises(OracleMisuseError):
            oracle.initialise(CryptReferences.generate(b"other"))

    def test_references_are_frozen(self):
        references = CryptReferences.generate(SECRET)
        with pytest.raises(AttributeError):
            references.secret = b"changed"
