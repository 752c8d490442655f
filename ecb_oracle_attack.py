"""
Attacks on block cipher encryption oracles: find the block size, tell ECB from CBC, and leak a secret that an
ECB oracle appends to attacker-controlled input one byte at a time
"""
from collections import namedtuple
from secrets import choice, randbelow, token_bytes
from typing import Callable, Iterable, List, Optional, Tuple

from block_modes import BlockCipherMode, cbc_encrypt, ecb_encrypt
from bytebuffer import Buffer
from errors import OracleMisuseError
from logs import get_logger
from references import BLOCK_SIZE, CryptReferences

log = get_logger(__name__)

Oracle = Callable[[bytes], bytes]

# ECB gives at least this many repeated windows when fed four identical blocks
ECB_REPEAT_THRESHOLD = 3

# Largest block size we'll look for
MAX_BLOCK_SIZE = 256


class AppendingEcbOracle:
    """
    Encrypts junk || attacker-controlled || secret using AES-128 ECB, with the key and secret held in a
    CryptReferences given to initialise(). The junk is a random number of random bytes picked at construction

    >>> oracle = AppendingEcbOracle()
    >>> oracle.encrypt(b"AAAA")
    Traceback (most recent call last):
    errors.OracleMisuseError: Oracle used before it was initialised
    >>> oracle = oracle.initialise(CryptReferences.generate(secret=b"Hack the planet"))
    >>> len(oracle.encrypt(b"A"))
    32
    >>> oracle.initialise(CryptReferences.generate(secret=b"again"))
    Traceback (most recent call last):
    errors.OracleMisuseError: Oracle is already initialised
    """
    junk: bytes
    references: Optional[CryptReferences]

    def __init__(self, prepended_junk_minmax: Tuple[int, int] = (0, 0)):
        junk_min, junk_max = prepended_junk_minmax
        if junk_min < 0:
            raise ValueError("junk_min must be >= 0")
        if junk_max < junk_min:
            raise ValueError("junk_max must be >= junk_min")
        self.junk = token_bytes(junk_min + randbelow(junk_max - junk_min + 1))
        self.references = None

    def initialise(self, references: CryptReferences) -> "AppendingEcbOracle":
        if self.references is not None:
            raise OracleMisuseError("Oracle is already initialised")
        self.references = references
        return self

    def encrypt(self, prefix: bytes) -> bytes:
        if self.references is None:
            raise OracleMisuseError("Oracle used before it was initialised")
        return ecb_encrypt(self.junk + bytes(prefix) + self.references.secret, key=self.references.key)


class ModeOracle:
    """
    Encrypts chosen plaintext with AES-128 in a fixed mode under a fixed key (and a fixed IV in the case of CBC).
    With bookend=True, the plaintext is first bookended with 5-10 random bytes on each side
    """
    mode: BlockCipherMode
    key: bytes
    iv: bytes
    bookend: bool

    def __init__(self, mode: BlockCipherMode, key: Optional[bytes] = None, iv: Optional[bytes] = None,
                 bookend: bool = False):
        self.mode = mode
        self.key = key if key is not None else token_bytes(BLOCK_SIZE)
        self.iv = iv if iv is not None else token_bytes(BLOCK_SIZE)
        self.bookend = bookend

    @classmethod
    def random(cls) -> "ModeOracle":
        """
        An oracle that is ECB half of the time and CBC the rest of the time
        """
        return cls(mode=choice((BlockCipherMode.ECB, BlockCipherMode.CBC)), bookend=True)

    def encrypt(self, plaintext: bytes) -> bytes:
        if self.bookend:
            plaintext = token_bytes(randbelow(6) + 5) + plaintext + token_bytes(randbelow(6) + 5)

        if self.mode is BlockCipherMode.ECB:
            return ecb_encrypt(plaintext, key=self.key)
        else:
            assert self.mode is BlockCipherMode.CBC, "What the hell happened here?"
            return cbc_encrypt(Buffer(plaintext).pad_to_block(BLOCK_SIZE), key=self.key, iv=self.iv)


def is_ecb_ciphertext(ciphertext: bytes, block_size: int = BLOCK_SIZE) -> bool:
    """
    ECB encrypts identical plaintext blocks to identical ciphertext blocks, so lots of repeated block-sized
    runs give it away

    >>> key = token_bytes(16)
    >>> plaintext = b"A" * 16 * 4
    >>> is_ecb_ciphertext(ModeOracle(BlockCipherMode.ECB, key=key).encrypt(plaintext))
    True
    >>> is_ecb_ciphertext(ModeOracle(BlockCipherMode.CBC, key=key).encrypt(plaintext))
    False
    """
    return Buffer(ciphertext).count_identical_runs(block_size) > ECB_REPEAT_THRESHOLD


def identify_ecb_ciphertexts(ciphertexts: Iterable[bytes], block_size: int = BLOCK_SIZE) -> List[bytes]:
    """
    Given a list of ciphertexts, return the ones suspected to have been encrypted using a block cipher in ECB mode
    """
    return [ciphertext for ciphertext in ciphertexts if is_ecb_ciphertext(ciphertext, block_size)]


def detect_oracle_mode(oracle: Oracle, block_size: int = BLOCK_SIZE) -> BlockCipherMode:
    """
    Determines if the callable oracle is encrypting using ECB or CBC

    Four identical blocks are sent, so even if the oracle prepends a few bytes there are three aligned ones left

    >>> oracle = ModeOracle.random()
    >>> detect_oracle_mode(oracle.encrypt) is oracle.mode
    True
    """
    ciphertext = oracle(b"A" * block_size * 4)
    if is_ecb_ciphertext(ciphertext, block_size):
        return BlockCipherMode.ECB
    return BlockCipherMode.CBC


def discover_block_size(oracle: Oracle) -> Tuple[int, int]:
    """
    Feed the oracle ever longer runs of identical bytes until the ciphertext grows. The growth is the block size.

    Returns the block size and the number of bytes the oracle adds to our input

    >>> oracle = AppendingEcbOracle().initialise(CryptReferences.generate(secret=b"A" * 20))
    >>> discover_block_size(oracle.encrypt)
    (16, 20)
    """
    base_len_ct = len(oracle(b""))
    for j in range(1, MAX_BLOCK_SIZE + 1):
        new_len = len(oracle(b"Z" * j))
        if new_len != base_len_ct:
            block_size = new_len - base_len_ct
            return block_size, new_len - block_size - j
    raise ValueError("Ciphertext length never changed. Oracle probably isn't a block cipher")


def find_junk_length(oracle: Oracle, block_size: int) -> int:
    """
    Find how many bytes the oracle puts in front of our input by pushing two identical blocks along until they
    line up with block boundaries
    """
    block = token_bytes(block_size)
    for i in range(block_size):
        ct_chunked = list(Buffer(oracle(token_bytes(i) + block * 2)).chunks(block_size))
        for j, (c1, c2) in enumerate(zip(ct_chunked, ct_chunked[1:])):
            if c1 == c2:
                # We've managed to block-align our two 'block' blocks
                # OR there is otherwise some adjacent block redundancy

                # Check to see that the pairwise block redundancy was not caused by
                # redundancy in the oracle's suffix
                confirm_chunked = list(Buffer(oracle(token_bytes(i + block_size * 2))).chunks(block_size))
                if confirm_chunked[j] != confirm_chunked[j + 1]:
                    return block_size * j - i
    raise ValueError("Failed to determine junk len. oracle probably isn't ECB")


Interrogation = namedtuple("Interrogation", ["block_size", "junk_length", "suffix_length"])


def interrogate_oracle(oracle: Oracle) -> Interrogation:
    """
    >>> oracle = AppendingEcbOracle().initialise(CryptReferences.generate(secret=b"A" * 8))
    >>> interrogate_oracle(oracle.encrypt)
    Interrogation(block_size=16, junk_length=0, suffix_length=8)

    >>> oracle = AppendingEcbOracle(prepended_junk_minmax=(40, 60)).initialise(CryptReferences.generate(secret=b"A" * 24))
    >>> block_size, junk_length, suffix_length = interrogate_oracle(oracle.encrypt)
    >>> block_size, junk_length == len(oracle.junk), suffix_length
    (16, True, 24)

    >>> interrogate_oracle(ModeOracle(BlockCipherMode.CBC).encrypt)
    Traceback (most recent call last):
    ValueError: Oracle isn't using ECB
    """
    block_size, added_length = discover_block_size(oracle)
    if detect_oracle_mode(oracle, block_size) is not BlockCipherMode.ECB:
        raise ValueError("Oracle isn't using ECB")
    junk_length = find_junk_length(oracle, block_size)
    interrogation = Interrogation(block_size=block_size,
                                  junk_length=junk_length,
                                  suffix_length=added_length - junk_length)
    log.debug("oracle interrogated", **interrogation._asdict())
    return interrogation


def recover_byte(oracle: Oracle, interrogation: Interrogation, known: bytes) -> Optional[int]:
    """
    Leak the byte of the oracle's suffix that follows `known`.

    Our input is sized so that the unknown byte is the last one of a block. Then every value is tried in a block
    where we control all of the other bytes, until one encrypts to the same thing. Returns None if nothing matches,
    which happens once we've run off the end of the suffix
    """
    block_size, junk_length, _ = interrogation
    # Fill up the junk's last block so that our input starts block-aligned
    junk_filler = b"Y" * (-junk_length % block_size)
    first_block = (junk_length + len(junk_filler)) // block_size

    aligning_chunk = b"Z" * (block_size - 1 - len(known) % block_size)
    ct_chunked = list(Buffer(oracle(junk_filler + aligning_chunk)).chunks(block_size))
    target_index = first_block + len(known) // block_size
    if target_index >= len(ct_chunked):
        return None
    target = ct_chunked[target_index]

    window = (b"Z" * (block_size - 1) + known)[-(block_size - 1):]
    for b in range(256):
        ct = oracle(junk_filler + window + bytes([b]))
        if ct[first_block * block_size:(first_block + 1) * block_size] == target:
            return b
    return None


def leak_appended_secret(oracle: Oracle) -> bytes:
    """
    Recover the secret that an ECB oracle appends to our input, stopping at its end

    >>> oracle = AppendingEcbOracle().initialise(CryptReferences.generate(secret=b"Hack the planet! Hack the planet!"))
    >>> leak_appended_secret(oracle.encrypt)
    b'Hack the planet! Hack the planet!'

    >>> oracle = AppendingEcbOracle(prepended_junk_minmax=(5, 10)).initialise(CryptReferences.generate(secret=b"YELLOW SUBMARINE"))
    >>> leak_appended_secret(oracle.encrypt)
    b'YELLOW SUBMARINE'
    """
    interrogation = interrogate_oracle(oracle)

    known = bytearray()
    while len(known) < interrogation.suffix_length:
        b = recover_byte(oracle, interrogation, bytes(known))
        if b is None:
            log.info("ran out of matches", recovered=len(known), expected=interrogation.suffix_length)
            break
        known.append(b)
        log.debug("byte recovered", position=len(known) - 1, value=b)

    log.info("secret leaked", length=len(known))
    return bytes(known)
