"""Key generation utility, producing textbook RSA key pairs from random primes.

The modulus size is split unevenly and at random between the two primes. The public exponent is not fixed at
65537 but drawn at random until it is coprime with the totient, after which the private exponent is its inverse.
The pair is bound to an identity by signing the identity string with the fresh private key.

Typical usage example:

    with RandState(1234) as rng:
        pub, priv = generate_key_pair(256, 50, rng, "alice")
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
from typing import Literal, overload

from rsastream import numtheory
from rsastream import rsa
from rsastream.randstate import RandState

logger = logging.getLogger(__name__)

MIN_BITS: int = 16


def _totient(p: int, q: int) -> int:
    return (p - 1) * (q - 1)


def make_pub(nbits: int,
             iters: int,
             rng: RandState,
             max_tries: int | None = None) -> tuple[int, int, int, int]:
    """Creates the public half of a key: both primes, the modulus and the public exponent.

    Args:
        nbits: Bits to share among the two primes. Each prime gets one extra bit, so the modulus ends up at least
            `nbits + 1` bits long. Must be >= `MIN_BITS`.
        iters: Miller-Rabin iterations for testing primes.
        rng: Random state for all draws.
        max_tries: Optional cap on the candidates drawn per prime and for the exponent.

    Returns:
        A tuple of (p, q, n, e).

    Raises:
        ValueError: If `nbits` is too small.
        RuntimeError: If `max_tries` is exceeded.
    """
    if nbits < MIN_BITS:
        raise ValueError(f"nbits must be at least {MIN_BITS}.")
    pbits = rng.randbelow(2 * nbits // 4) + nbits // 4
    qbits = nbits - pbits
    logger.debug("Splitting %d bits into p: %d, q: %d", nbits, pbits, qbits)
    p = numtheory.make_prime(pbits, iters, rng, max_tries)
    q = numtheory.make_prime(qbits, iters, rng, max_tries)
    while p == q:  # Only plausible for tiny keys.
        q = numtheory.make_prime(qbits, iters, rng, max_tries)
    n = p * q
    totient = _totient(p, q)
    tries = 0
    while max_tries is None or tries < max_tries:
        tries += 1
        e = rng.randbits(nbits)
        if 1 < e < totient and numtheory.gcd(e, totient) == 1:
            logger.debug("Public exponent found after %d draws.", tries)
            return p, q, n, e
    raise RuntimeError(f"Drew {max_tries} exponents with none coprime to the totient.")


def make_priv(e: int, p: int, q: int) -> int:
    """Computes the private exponent for `e` and the primes `p`, `q`.

    Raises:
        NoInverseError: If `e` is not coprime with the totient.
    """
    return numtheory.mod_inverse(e, _totient(p, q))


@overload
def generate_key_pair(nbits: int,
                      iters: int,
                      rng: RandState,
                      username: str,
                      max_tries: int | None = None,
                      expose_primes: Literal[False] = False) -> tuple[rsa.RSAPubKey, rsa.RSAPrivKey]:
    ...


@overload
def generate_key_pair(nbits: int,
                      iters: int,
                      rng: RandState,
                      username: str,
                      max_tries: int | None = None,
                      expose_primes: Literal[True] = False) -> tuple[rsa.RSAPubKey, rsa.RSAPrivKey, int, int]:
    ...


def generate_key_pair(
    nbits: int,
    iters: int,
    rng: RandState,
    username: str,
    max_tries: int | None = None,
    expose_primes: bool = False
) -> tuple[rsa.RSAPubKey, rsa.RSAPrivKey] | tuple[rsa.RSAPubKey, rsa.RSAPrivKey, int, int]:
    """Generates an RSA key pair, with the public key carrying a signed identity.

    Args:
        nbits: See `make_pub`.
        iters: Miller-Rabin iterations for testing primes.
        rng: Random state for all draws.
        username: Identity to sign. Must consist of radix-62 digits only.
        max_tries: See `make_pub`.
        expose_primes: Whether to return the primes as well or not. Defaults to False.

    Returns:
        A tuple of (public key, private key), or if exposed (public key, private key, p, q).

    Raises:
        ValueError: If the username is not radix-62 or does not fit under the modulus.
    """
    p, q, n, e = make_pub(nbits, iters, rng, max_tries)
    d = make_priv(e, p, q)
    priv = rsa.RSAPrivKey(n, d)
    signature = priv.sign(rsa.b62_dec(username))
    pub = rsa.RSAPubKey(n, e, signature, username)
    logger.debug("Generated %d-bit modulus for %s.", n.bit_length(), username)
    if not expose_primes:
        del p, q
        return pub, priv
    return pub, priv, p, q
