#!/usr/bin/env python3
from secrets import token_bytes
from typing import Callable, Dict

from block_modes import ecb_decrypt, ecb_encrypt
from bytebuffer import Buffer
from logs import configure_logging, get_logger
from references import BLOCK_SIZE

"""
ECB cut-and-paste

Write a k=v parsing routine, as if for a structured cookie, and a function that encodes a user profile in that
format given an email address:

email=foo@bar.com&uid=10&role=user

profile_for() should not allow encoding metacharacters (& and =). Encrypt the encoded profile under a random key
and "provide" that to the "attacker". Decrypt the encoded user profile and parse it.

Using only the user input to profile_for() (as an oracle to generate "valid" ciphertexts) and the ciphertexts
themselves, make a role=admin profile.
"""

log = get_logger(__name__)


def parse_profile(encoding: str) -> Dict[str, str]:
    """
    Parse a k=v&k=v string. Later keys win, and pairs without an '=' are dropped

    >>> parse_profile("foo=bar&baz=qux&zap=zazzle")
    {'foo': 'bar', 'baz': 'qux', 'zap': 'zazzle'}
    >>> parse_profile("role=user&role=admin&rol")
    {'role': 'admin'}
    """
    profile: Dict[str, str] = {}
    for pair in encoding.split("&"):
        key, sep, value = pair.partition("=")
        if sep:
            profile[key] = value
    return profile


def encode_profile(profile: Dict[str, str]) -> str:
    return "&".join(f"{k}={v}" for k, v in profile.items())


def profile_for(email: str) -> str:
    """
    >>> profile_for("foo@bar.com")
    'email=foo@bar.com&uid=10&role=user'
    >>> profile_for("foo@bar.com&role=admin")
    'email=foo@bar.comroleadmin&uid=10&role=user'
    """
    email = "".join(c for c in email if c not in "&=")
    return encode_profile({
        "email": email,
        "uid": "10",
        "role": "user",
    })


class ProfileOracle:
    key: bytes

    def __init__(self):
        self.key = token_bytes(BLOCK_SIZE)

    def encrypt(self, email: str) -> bytes:
        """
        Encode email as a profile, encrypt it using AES-128 ECB, and return it
        """
        profile = profile_for(email)
        ct = ecb_encrypt(profile.encode(), key=self.key)
        log.debug("profile encrypted", email=email, profile=profile, ciphertext=ct.hex())
        return ct

    def decrypt(self, ciphertext: bytes) -> Dict[str, str]:
        """
        Decrypt using AES-128 ECB, strip the padding and parse the profile

        >>> oracle = ProfileOracle()
        >>> oracle.decrypt(oracle.encrypt("foo@bar.com"))["role"]
        'user'
        """
        pt = bytes(Buffer(ecb_decrypt(ciphertext, key=self.key)).unpad()).decode(errors="replace")
        profile = parse_profile(pt)
        log.debug("profile decrypted", profile=profile)
        return profile


def craft_profile_ct(oracle: Callable[[str], bytes], role: str) -> bytes:
    """
    >>> oracle = ProfileOracle()
    >>> oracle.decrypt(craft_profile_ct(oracle=oracle.encrypt, role="admin"))["role"]
    'admin'
    >>> profile = craft_profile_ct(oracle=oracle.encrypt, role="Z"*3)
    Traceback (most recent call last):
    ValueError: Role 'ZZZ' must have a certain length or the attack fails
    >>> profile = craft_profile_ct(oracle=oracle.encrypt, role="Z"*20)
    Traceback (most recent call last):
    ValueError: Role 'ZZZZZZZZZZZZZZZZZZZZ' must have a certain length or the attack fails
    """
    # Anything shorter lets "&role=" from the real profile into our block
    if not 3 < len(role) <= BLOCK_SIZE:
        raise ValueError(f"Role {role!r} must have a certain length or the attack fails")
    if any(c in role for c in "&="):
        raise ValueError(f"Role {role!r} can't contain metacharacters")

    # Build a block that starts with the given role, and ends with '&uid=10&rol' (ish)
    b1 = " " * (BLOCK_SIZE - len("email="))
    ct = oracle(b1 + role)
    block_role = list(Buffer(ct).chunks(BLOCK_SIZE))[1]

    # Build a block of all padding
    base_ct = oracle("")
    for i in range(1, BLOCK_SIZE + 1):
        ct = oracle(" " * i)
        if len(base_ct) != len(ct):
            block_of_all_padding = list(Buffer(ct).chunks(BLOCK_SIZE))[-1]
            break
    else:
        raise ValueError("Ciphertext never grew. Oracle probably isn't a block cipher")

    # Find a padding_len such that a block ends with 'role='
    padding_len = -len("email=" + "&uid=10&role=") % BLOCK_SIZE
    ct = oracle(" " * padding_len)
    winning_ct = b"".join(list(Buffer(ct).chunks(BLOCK_SIZE))[:-1]) + block_role + block_of_all_padding
    return winning_ct


def main():
    configure_logging(verbose=True)
    oracle = ProfileOracle()
    profile = craft_profile_ct(oracle=oracle.encrypt,
                               role="admin")
    role = oracle.decrypt(profile)["role"]
    print(f"Role: {role!r}")


if __name__ == "__main__":
    main()
