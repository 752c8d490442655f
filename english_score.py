from collections import Counter
from math import inf
from types import MappingProxyType
from typing import Mapping

from bytebuffer import BytesLike

# Letter frequencies are scaled down so that space can take a fifth of the mass
ENGLISH_TEXT_FREQUENCY: Mapping[str, float] = MappingProxyType({
    ' ': 0.2,
    'a': 0.06532628287475481, 'b': 0.011949929794162463, 'c': 0.022306535615769934, 'd': 0.03425646540993239,
    'e': 0.10356605821607469, 'f': 0.017526563698104944, 'g': 0.015933239725549952, 'h': 0.04859638116292735,
    'i': 0.055766339039424836, 'j': 0.0011949929794162464, 'k': 0.0061342972943367316, 'l': 0.031866479451099904,
    'm': 0.019119887670659943, 'n': 0.05337635308059234, 'o': 0.059749648970812315, 'p': 0.015136577739272454,
    'q': 0.0007568288869636226, 'r': 0.04779971917664985, 's': 0.05018970513548235, 't': 0.07249624075125227,
    'u': 0.022306535615769934, 'v': 0.007807287465519476, 'w': 0.019119887670659943, 'x': 0.0011949929794162464,
    'y': 0.015933239725549952, 'z': 0.0005895298698453482,
})


def score_english_text(text: BytesLike, frequencies: Mapping[str, float] = ENGLISH_TEXT_FREQUENCY) -> float:
    """
    Give a penalty for how far the character frequencies of text are from English. Every byte value seen
    contributes (observed - expected) ** 2, where bytes that aren't in the frequency table are expected to
    never occur. Lower score means more English-like input

    An empty input has no frequencies to compare, so it gets the worst possible score

    >>> score_english_text(b"Hello World") == score_english_text(b"hELLO wORLD")
    True
    >>> score_english_text(b"the cat sat on the mat") < score_english_text(bytes(range(200, 222)))
    True
    >>> score_english_text(b"")
    inf
    """
    text = bytes(text)
    if not text:
        return inf

    counts = Counter(chr(b).lower() if 0x41 <= b <= 0x5a else chr(b) for b in text)

    score = 0.0
    for c, count in counts.items():
        observed_frequency = count / len(text)
        score += (observed_frequency - frequencies.get(c, 0.0)) ** 2
    return score
