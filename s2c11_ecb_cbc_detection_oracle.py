#!/usr/bin/env python3
from ecb_oracle_attack import ModeOracle, detect_oracle_mode

"""
An ECB/CBC detection oracle

Write a function that encrypts data under an unknown key --- that is, a function that generates a random key
and encrypts under it. Under the hood, have the function append 5-10 bytes (count chosen randomly) before the
plaintext and 5-10 bytes after the plaintext. Now, have the function choose to encrypt under ECB 1/2 the time,
and under CBC the other half (just use random IVs each time for CBC).

Detect the block cipher mode the function is using each time.
"""


def main():
    n = 100
    correct = 0
    for _ in range(n):
        oracle = ModeOracle.random()
        if detect_oracle_mode(oracle.encrypt) is oracle.mode:
            correct += 1
    print(f"Guessed {correct}/{n} modes correctly")


if __name__ == "__main__":
    main()
