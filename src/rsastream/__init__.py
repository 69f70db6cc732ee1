"""Textbook RSA over byte streams, in an Academic Sense.

Provides prime generation and the number theory behind it, key pair generation with a signed identity, plain-text
key files, and block-wise encryption/decryption of streams into hexadecimal ciphertext lines.

Typical usage example:

    with RandState(2025) as rng:
        pub, priv = generate_key_pair(256, 50, rng, "alice")
    pub.encrypt_stream(plain, cipher)
    priv.decrypt_stream(cipher, recovered)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from rsastream.keygen import generate_key_pair
from rsastream.keygen import make_priv
from rsastream.keygen import make_pub
from rsastream.numtheory import gcd
from rsastream.numtheory import is_prime
from rsastream.numtheory import make_prime
from rsastream.numtheory import mod_inverse
from rsastream.numtheory import NoInverseError
from rsastream.numtheory import pow_mod
from rsastream.randstate import RandState
from rsastream.rsa import b62_dec
from rsastream.rsa import decrypt_stream
from rsastream.rsa import encrypt_stream
from rsastream.rsa import RSAPrivKey
from rsastream.rsa import RSAPubKey
from rsastream.rsa import sign
from rsastream.rsa import verify

__version__ = "0.1.0"
__all__ = [
    "RSAPrivKey",
    "RSAPubKey",
    "RandState",
    "NoInverseError",
    "pow_mod",
    "is_prime",
    "make_prime",
    "gcd",
    "mod_inverse",
    "make_pub",
    "make_priv",
    "generate_key_pair",
    "encrypt_stream",
    "decrypt_stream",
    "sign",
    "verify",
    "b62_dec",
]
