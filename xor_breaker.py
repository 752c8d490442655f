"""
Break single-byte and repeating-key XOR with character frequency analysis
"""
from dataclasses import dataclass
from typing import Callable, Iterable, List

from bytebuffer import Buffer, BytesLike
from english_score import score_english_text
from errors import MalformedInputError
from logs import get_logger
from result_keeper import ResultKeeper

log = get_logger(__name__)

DEFAULT_KEY_LENGTHS = range(2, 41)

# The shortest key length whose plaintext scores within this factor of the best score wins
KEY_LENGTH_SCORE_TOLERANCE = 1.5

ScoringFunction = Callable[[bytes], float]


@dataclass
class ScoredDecryptionResult:
    plaintext: bytes
    ciphertext: bytes
    key: int
    score: float

    def __repr__(self):
        return f"ScoredDecryptionResult(plaintext={self.plaintext}, key={self.key:#04x}, score={self.score:.4f})"


@dataclass
class RepeatingKeyXorResult:
    key: bytes
    plaintext: bytes
    score: float


def _single_byte_decryptions(ciphertext: bytes,
                             scoring_function: ScoringFunction) -> Iterable[ScoredDecryptionResult]:
    buf = Buffer(ciphertext)
    for k in range(256):
        plaintext = bytes(buf.xor(bytes([k])))
        yield ScoredDecryptionResult(plaintext=plaintext,
                                     ciphertext=ciphertext,
                                     key=k,
                                     score=scoring_function(plaintext))


def break_single_byte_xor(ciphertext: BytesLike,
                          scoring_function: ScoringFunction = score_english_text) -> ScoredDecryptionResult:
    """
    Brute-force a single-byte XOR ciphertext, returning the decryption that scores best

    >>> ciphertext = bytes.fromhex("1b37373331363f78151b7f2b783431333d78397828372d363c78373e783a393b3736")
    >>> break_single_byte_xor(ciphertext).plaintext
    b"Cooking MC's like a pound of bacon"
    """
    ciphertext = bytes(ciphertext)
    if not ciphertext:
        raise MalformedInputError("ciphertext must be non-zero length")

    keeper: ResultKeeper[ScoredDecryptionResult] = ResultKeeper()
    for result in _single_byte_decryptions(ciphertext, scoring_function):
        keeper.add(result.score, result)
    return keeper.best()


def detect_single_byte_xor(ciphertexts: Iterable[BytesLike],
                           keep: int = 10,
                           scoring_function: ScoringFunction = score_english_text) -> List[ScoredDecryptionResult]:
    """
    Given many ciphertexts, some of which may have been encrypted with single-byte XOR, return the `keep`
    most English-looking decryptions across all of them, best first

    >>> plaintext = b"Now that the party is jumping, the bass kicked in and the vegas are pumping. Quick to the point, no faking"
    >>> noise = [bytes((i * 37 + j) % 256 for i in range(len(plaintext))) for j in range(5)]
    >>> results = detect_single_byte_xor(noise + [bytes(Buffer(plaintext).xor(b"5"))], keep=3)
    >>> results[0].plaintext == plaintext, results[0].key == ord("5")
    (True, True)
    """
    keeper: ResultKeeper[ScoredDecryptionResult] = ResultKeeper(size=keep)
    for ciphertext in ciphertexts:
        for result in _single_byte_decryptions(bytes(ciphertext), scoring_function):
            keeper.add(result.score, result)
    return list(keeper)


def normalised_chunk_distance(ciphertext: BytesLike, key_length: int) -> float:
    """
    Average the hamming distance between each pair of neighbouring key_length sized chunks, normalised by
    key_length. Repeating-key XOR with the right key length gives a lower distance than a wrong one

    >>> normalised_chunk_distance(b"this is a testwokka wokka!!!", 14) == 37 / 14
    True
    >>> normalised_chunk_distance(b"ABCDEF", 4)
    Traceback (most recent call last):
    errors.MalformedInputError: Need at least two chunks of length 4
    """
    pairs = list(Buffer(ciphertext).gliding_pairs(key_length))
    if not pairs:
        raise MalformedInputError(f"Need at least two chunks of length {key_length}")
    total = sum(Buffer(a).hamming_distance(b) for a, b in pairs)
    return total / len(pairs) / key_length


def rank_key_lengths(ciphertext: BytesLike,
                     key_lengths: Iterable[int] = DEFAULT_KEY_LENGTHS,
                     keep: int = 3) -> ResultKeeper[int]:
    """
    Return the `keep` key lengths with the lowest normalised chunk distance. Key lengths that don't fit at
    least twice in the ciphertext are skipped
    """
    ciphertext = bytes(ciphertext)
    keeper: ResultKeeper[int] = ResultKeeper(size=keep)
    for key_length in key_lengths:
        if key_length < 1 or key_length > len(ciphertext) // 2:
            continue
        distance = normalised_chunk_distance(ciphertext, key_length)
        log.debug("key length scored", key_length=key_length, distance=distance)
        keeper.add(distance, key_length)
    return keeper


def break_repeating_key_xor_with_length(ciphertext: BytesLike,
                                        key_length: int,
                                        scoring_function: ScoringFunction = score_english_text) -> bytes:
    """
    Return the best-guess key of a known length. Each column of the transposed ciphertext was XORed with one
    key byte, so it falls to single-byte XOR frequency analysis

    >>> ciphertext = Buffer(b"Burning 'em, if you ain't quick and nimble. I go crazy when I hear a cymbal").xor(b"ICE")
    >>> break_repeating_key_xor_with_length(ciphertext, 3)
    b'ICE'
    """
    columns = Buffer(ciphertext).transpose(key_length)
    return bytes(break_single_byte_xor(bytes(column), scoring_function).key for column in columns)


def shortest_period(key: bytes) -> bytes:
    """
    Return the shortest key that, cycled, is the same as key

    >>> shortest_period(b"ICEICEICE")
    b'ICE'
    >>> shortest_period(b"ICEIC")
    b'ICEIC'
    """
    for period in range(1, len(key)):
        if len(key) % period == 0 and key[:period] * (len(key) // period) == key:
            return key[:period]
    return key


def break_repeating_key_xor(ciphertext: BytesLike,
                            key_lengths: Iterable[int] = DEFAULT_KEY_LENGTHS,
                            keep: int = 3,
                            scoring_function: ScoringFunction = score_english_text) -> RepeatingKeyXorResult:
    """
    Recover the key and plaintext of a repeating-key XOR ciphertext.

    The `keep` most promising key lengths (and their divisors) are each broken and their plaintexts scored. Any
    multiple of the real key length decrypts to English too, and with fewer bytes per column it can overfit to a
    slightly better score, so the shortest key length scoring within KEY_LENGTH_SCORE_TOLERANCE of the best one
    wins. The winning key is then cut back down to its shortest period.

    >>> ciphertext = Buffer(b"Burning 'em, if you ain't quick and nimble. I go crazy when I hear a cymbal" * 4).xor(b"ICE")
    >>> break_repeating_key_xor(ciphertext, key_lengths=[6, 12]).key
    b'ICE'

    @param ciphertext: The encrypted ciphertext
    @param key_lengths: Candidate key lengths to rank
    @param keep: How many of the best ranked key lengths to actually try
    @param scoring_function: Scores a plaintext, lower being more plausible
    """
    ciphertext = bytes(ciphertext)
    if not ciphertext:
        raise MalformedInputError("ciphertext must be non-zero length")
    key_lengths = list(key_lengths)

    ranked_lengths = rank_key_lengths(ciphertext, key_lengths=key_lengths, keep=keep)
    if not len(ranked_lengths):
        raise MalformedInputError(f"ciphertext of length {len(ciphertext)} is too short for any key length")

    # A multiple of the real key length ranks as well as the real one, so try the divisors of each ranked length
    # too. Divisors don't need to be in key_lengths
    lengths_to_try: List[int] = []
    for ranked_length in ranked_lengths:
        for key_length in range(1, ranked_length + 1):
            if ranked_length % key_length == 0 and key_length not in lengths_to_try:
                lengths_to_try.append(key_length)

    candidates: List[RepeatingKeyXorResult] = []
    for key_length in sorted(lengths_to_try):
        key = break_repeating_key_xor_with_length(ciphertext, key_length, scoring_function)
        plaintext = bytes(Buffer(ciphertext).xor(key))
        score = scoring_function(plaintext)
        log.debug("key length tried", key_length=key_length, key=key.hex(), score=score)
        candidates.append(RepeatingKeyXorResult(key=key, plaintext=plaintext, score=score))

    best_score = min(candidate.score for candidate in candidates)
    # candidates are in key length order
    best = next(c for c in candidates if c.score <= best_score * KEY_LENGTH_SCORE_TOLERANCE)
    best = RepeatingKeyXorResult(key=shortest_period(best.key), plaintext=best.plaintext, score=best.score)
    log.info("repeating-key XOR broken", key_length=len(best.key), score=best.score, best_score=best_score)
    return best
