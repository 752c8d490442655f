from enum import Enum
from typing import List

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from bytebuffer import Buffer, BytesLike
from errors import MalformedInputError
from references import BLOCK_SIZE


class BlockCipherMode(Enum):
    ECB = 0
    CBC = 1


def _check_block(block: bytes) -> None:
    if len(block) != BLOCK_SIZE:
        raise MalformedInputError(f"Block must be {BLOCK_SIZE} bytes, got {len(block)}")


def encrypt_block(key: bytes, block: BytesLike) -> bytes:
    """
    Encrypt exactly one block with AES-128

    >>> len(encrypt_block(b"YELLOW SUBMARINE", b"A" * 16))
    16
    >>> encrypt_block(b"too short", b"A" * 16)
    Traceback (most recent call last):
    ValueError: Invalid key size (72) for AES.
    >>> encrypt_block(b"YELLOW SUBMARINE", b"A" * 15)
    Traceback (most recent call last):
    errors.MalformedInputError: Block must be 16 bytes, got 15
    """
    block = bytes(block)
    _check_block(block)
    encryptor = Cipher(algorithms.AES128(key), modes.ECB()).encryptor()
    return encryptor.update(block) + encryptor.finalize()


def decrypt_block(key: bytes, block: BytesLike) -> bytes:
    """
    >>> decrypt_block(b"YELLOW SUBMARINE", encrypt_block(b"YELLOW SUBMARINE", b"A" * 16))
    b'AAAAAAAAAAAAAAAA'
    """
    block = bytes(block)
    _check_block(block)
    decryptor = Cipher(algorithms.AES128(key), modes.ECB()).decryptor()
    return decryptor.update(block) + decryptor.finalize()


def _check_block_multiple(ciphertext: Buffer) -> None:
    if len(ciphertext) % BLOCK_SIZE:
        raise MalformedInputError("The length of the provided data is not a multiple of the block length.")


def ecb_encrypt(plaintext: BytesLike, key: bytes) -> bytes:
    """
    Encrypt using AES-128 in ECB mode. Always PKCS#7 pads, so block-aligned input grows by a whole block

    >>> len(ecb_encrypt(b"A" * 16, b"YELLOW SUBMARINE"))
    32
    >>> ct = ecb_encrypt(b"A" * 32, b"YELLOW SUBMARINE")
    >>> ct[:16] == ct[16:32]
    True
    """
    padded = Buffer(plaintext).pad_to_block(BLOCK_SIZE)
    return b"".join(encrypt_block(key, block) for block in padded.chunks(BLOCK_SIZE))


def ecb_decrypt(ciphertext: BytesLike, key: bytes) -> bytes:
    """
    Decrypt using AES-128 in ECB mode. Padding is left for the caller to strip

    >>> key = b"YELLOW SUBMARINE"
    >>> bytes(Buffer(ecb_decrypt(ecb_encrypt(b"Beware of hazardous materials", key), key)).unpad())
    b'Beware of hazardous materials'
    >>> ecb_decrypt(b"too short", key)
    Traceback (most recent call last):
    errors.MalformedInputError: The length of the provided data is not a multiple of the block length.
    """
    ciphertext = Buffer(ciphertext)
    _check_block_multiple(ciphertext)
    return b"".join(decrypt_block(key, block) for block in ciphertext.chunks(BLOCK_SIZE))


def cbc_encrypt(plaintext: BytesLike, key: bytes, iv: bytes) -> bytes:
    """
    Encrypt using AES-128 in CBC mode (the hard way) using the given key

    Only the final short block is padded. Block-aligned plaintext gets no extra padding block, so add one
    beforehand if the receiver is going to unpad

    >>> key = b"YELLOW SUBMARINE"
    >>> iv = bytes(16)
    >>> len(cbc_encrypt(b"A" * 16, key, iv)), len(cbc_encrypt(b"A" * 17, key, iv))
    (16, 32)
    >>> cbc_encrypt(b"A" * 16, key, iv) == encrypt_block(key, b"A" * 16)
    True

    # This blows up in fixed_xor before the Cipher gets a chance to complain
    >>> cbc_encrypt(b"AAAA", key, iv=b"too short")
    Traceback (most recent call last):
    errors.UnequalLengthError: Arguments are of different length
    """
    ciphertext: List[bytes] = []
    prev_block = bytes(iv)
    for chunk in Buffer(plaintext).chunks(BLOCK_SIZE):
        chunk = Buffer(chunk).pad(BLOCK_SIZE).fixed_xor(prev_block)
        prev_block = encrypt_block(key, chunk)
        ciphertext.append(prev_block)
    return b"".join(ciphertext)


def cbc_decrypt(ciphertext: BytesLike, key: bytes, iv: bytes) -> bytes:
    """
    Decrypt using AES-128 in CBC mode (the hard way) using the given key. Padding is left for the caller to strip

    >>> key = b"YELLOW SUBMARINE"
    >>> iv = bytes(16)
    >>> plaintext = bytes(Buffer(b"That's a lotta words, too bad I ain't reading em").pad_to_block(16))
    >>> cbc_decrypt(cbc_encrypt(plaintext, key, iv), key, iv) == plaintext
    True
    >>> cbc_decrypt(b"too short", key, iv)
    Traceback (most recent call last):
    errors.MalformedInputError: The length of the provided data is not a multiple of the block length.
    """
    ciphertext = Buffer(ciphertext)
    _check_block_multiple(ciphertext)

    plaintext: List[bytes] = []
    prev_block = bytes(iv)
    for chunk in ciphertext.chunks(BLOCK_SIZE):
        plaintext.append(bytes(Buffer(decrypt_block(key, chunk)).fixed_xor(prev_block)))
        # Prepare to XOR this block into the next decryption operation
        prev_block = chunk
    return b"".join(plaintext)
