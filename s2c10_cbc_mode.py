#!/usr/bin/env python3
from block_modes import cbc_decrypt, cbc_encrypt
from bytebuffer import Buffer

"""
Implement CBC mode

In CBC mode, each ciphertext block is added to the next plaintext block before the next call to the cipher core.
The first plaintext block, which has no associated previous ciphertext block, is added to a "fake 0th ciphertext
block" called the initialization vector, or IV.

Implement CBC mode by hand by taking the ECB function you wrote earlier, making it encrypt instead of decrypt,
and using your XOR function from the previous exercise to combine them.
"""


def main():
    key = b"YELLOW SUBMARINE"
    iv = bytes(16)
    plaintext = Buffer(b"Play that funky music, white boy").pad_to_block(16)

    ciphertext = cbc_encrypt(plaintext, key=key, iv=iv)
    print(f"Ciphertext: {Buffer(ciphertext).base64()}")

    decrypted = Buffer(cbc_decrypt(ciphertext, key=key, iv=iv)).unpad()
    print(f"Plaintext: {bytes(decrypted)!r}")


if __name__ == "__main__":
    main()
