#!/usr/bin/env python3
from bytebuffer import Buffer
from ecb_oracle_attack import AppendingEcbOracle, leak_appended_secret
from logs import configure_logging
from references import CryptReferences

# Solves both s2c12 and s2c14

"""
[+] s2c12 Byte-at-a-time ECB decryption (Simple)

Make a function that produces AES-128-ECB(your-string || unknown-string, random-key) with a consistent but
unknown key. It turns out: you can decrypt "unknown-string" with repeated calls to the oracle function!

    Feed identical bytes of your-string to the function 1 at a time. Discover the block size of the cipher.
    Detect that the function is using ECB.
    Knowing the block size, craft an input block that is exactly 1 byte short. Think about what the oracle
    function is going to put in that last byte position.
    Make a dictionary of every possible last byte by feeding different strings to the oracle.
    Match the output of the one-byte-short input to one of the entries in your dictionary. You've now
    discovered the first byte of unknown-string.
    Repeat for the next byte.

[+] s2c14 Byte-at-a-time ECB decryption (Harder)

Now generate a random count of random bytes and prepend this string to every plaintext:

AES-128-ECB(random-prefix || attacker-controlled || target-bytes, random-key)
"""

FLAG = ("Um9sbGluJyBpbiBteSA1LjAKV2l0aCBteSByYWctdG9wIGRvd24gc28gbXkgaGFpciBjYW4gYmxvdwpUaGUgZ2lybGllcyBvbiBzdGFuZGJ5"
        "IHdhdmluZyBqdXN0IHRvIHNheSBoaQpEaWQgeW91IHN0b3A/IE5vLCBJIGp1c3QgZHJvdmUgYnkK")


def main():
    configure_logging()
    flag = bytes(Buffer.from_base64(FLAG))

    for junk_length in (0, 7, 16, 40):
        references = CryptReferences.generate(secret=flag)
        oracle = AppendingEcbOracle(prepended_junk_minmax=(junk_length, junk_length)).initialise(references)
        res = leak_appended_secret(oracle.encrypt)
        assert res == flag, "Oops"

    print(res.decode())


if __name__ == "__main__":
    main()
