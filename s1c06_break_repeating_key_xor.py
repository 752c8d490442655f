#!/usr/bin/env python3
from functools import partial

from bytebuffer import Buffer
from english_score import score_english_text
from logs import configure_logging
from references import CryptReferences
from xor_breaker import break_repeating_key_xor, rank_key_lengths

"""
Break repeating-key XOR

Let KEYSIZE be the guessed length of the key; try values from 2 to (say) 40.
For each KEYSIZE, find the edit distance/Hamming distance between KEYSIZE worth of bytes, normalised by
KEYSIZE. The KEYSIZE with the smallest normalized edit distance is probably the key. You could proceed perhaps
with the smallest 2-3 KEYSIZE values.
Now transpose the blocks: make a block that is the first byte of every block, and a block that is the second
byte of every block, and so on. Solve each block as if it was single-character XOR.
For each block, the single-byte XOR key that produces the best looking histogram is the repeating-key XOR key
byte for that block. Put them together and you have the key.
"""

PLAINTEXT = b"""\
The lighthouse keeper wrote in his log every evening, whether or not anything had happened. Most days the
entry was only a line or two about the weather and the state of the lamp, but on the night of the storm he
filled three pages. He wrote that the wind had come around to the north just after six, that the rain had
turned to hail, and that a small fishing boat had been seen off the point with no lights showing. He wrote
that he had rung the bell until his arms ached and that he did not know if anyone on the boat had heard it.
In the morning the boat was found on the beach below the cliffs, empty and undamaged, with its nets still
folded neatly in the stern. Nobody in the village ever learned where the crew had gone.
"""


def main():
    configure_logging(verbose=True)
    references = CryptReferences.generate(secret=b"Terminator X: Bring the noise")
    ciphertext = Buffer(PLAINTEXT).xor(references.secret)

    print(f"Ranked key lengths: {list(rank_key_lengths(ciphertext, keep=5))}")

    scoring_function = partial(score_english_text, frequencies=references.frequencies)
    result = break_repeating_key_xor(ciphertext, keep=5, scoring_function=scoring_function)
    print(f"Key: {result.key!r}")
    print(result.plaintext.decode(errors="replace"))


if __name__ == "__main__":
    main()
