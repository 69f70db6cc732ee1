"""Number theory primitives backing the RSA engine.

Modular exponentiation, Miller-Rabin primality testing, random prime generation, the Euclidean GCD and modular
inversion through the Extended Euclidean Algorithm. All functions are pure over Python integers, except where a
`RandState` is handed in for witnesses and candidates.

Typical usage example:

    rng = RandState(42)
    p = make_prime(128, 50, rng)
    assert is_prime(p, 50, rng)
    d = mod_inverse(65537, p - 1)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging

from rsastream.randstate import RandState

logger = logging.getLogger(__name__)


class NoInverseError(ArithmeticError):
    """Raised when the modular inverse of a value does not exist."""


def pow_mod(base: int, exponent: int, modulus: int) -> int:
    """Computes `base**exponent % modulus` by right-to-left square-and-multiply.

    Args:
        base: The base. May be any integer, it is reduced first.
        exponent: The exponent. Must be >= 0.
        modulus: The modulus. Must be >= 1.

    Returns:
        The result, in `[0, modulus)`.

    Raises:
        ValueError: If the exponent is negative or the modulus is not positive.
    """
    if exponent < 0:
        raise ValueError("exponent must be >= 0")
    if modulus < 1:
        raise ValueError("modulus must be >= 1")
    v = 1 % modulus
    p = base % modulus
    while exponent > 0:
        if exponent & 1:
            v = (v * p) % modulus
        p = (p * p) % modulus
        exponent //= 2
    return v


def is_prime(n: int, iters: int, rng: RandState) -> bool:
    """Perform Miller-Rabin primality test.

    Args:
        n: Integer to be tested.
        iters: Number of Miller-Rabin iterations to perform.
            A composite slips through with probability at most 4**-iters.
        rng: Random state to draw witnesses from.

    Returns:
        True if `n` is probably prime, False otherwise.
    """
    if n < 2:
        return False
    if n in (2, 3):
        return True
    if n % 2 == 0:
        return False
    r = n - 1
    s = 0
    while r % 2 == 0:
        s += 1
        r //= 2
    for _ in range(iters):
        a = rng.randbelow(n - 3) + 2
        y = pow_mod(a, r, n)
        if y == 1 or y == n - 1:
            continue
        for _ in range(1, s):
            y = pow_mod(y, 2, n)
            if y == n - 1:
                break
            if y == 1:
                return False
        else:
            return False
    return True


def make_prime(bits: int, iters: int, rng: RandState, max_tries: int | None = None) -> int:
    """Generate a probable prime exactly `bits + 1` bits long.

    Draws uniformly random `bits + 1` bit values until one has its top bit set and passes `is_prime`.

    Args:
        bits: One less than the bit length of the prime.
        iters: Number of Miller-Rabin iterations per candidate.
        rng: Random state to draw candidates and witnesses from.
        max_tries: Optional cap on the number of candidates drawn. Unbounded if None.

    Returns:
        A probable prime.

    Raises:
        ValueError: If `bits` is negative.
        RuntimeError: If `max_tries` candidates were drawn without finding a prime.
    """
    if bits < 0:
        raise ValueError("bits must be >= 0")
    tries = 0
    while max_tries is None or tries < max_tries:
        tries += 1
        candidate = rng.randbits(bits + 1)
        if candidate.bit_length() == bits + 1 and is_prime(candidate, iters, rng):
            logger.debug("Found %d-bit prime after %d candidates.", bits + 1, tries)
            return candidate
    raise RuntimeError(f"Drew {max_tries} candidates with no prime found. Check the random state.")


def gcd(a: int, b: int) -> int:
    """Computes the greatest common divisor of `a` and `b`."""
    while b != 0:
        a, b = b, a % b
    return a


def mod_inverse(a: int, n: int) -> int:
    """Computes the inverse of `a` modulo `n` via the Extended Euclidean Algorithm.

    Args:
        a: The value to invert.
        n: The modulus.

    Returns:
        The inverse `i` in `[0, n)`, such that `a * i % n == 1`.

    Raises:
        NoInverseError: If `a` and `n` are not coprime.
    """
    r, r1 = n, a
    t, t1 = 0, 1
    while r1 != 0:
        q = r // r1
        r, r1 = r1, r - q * r1
        t, t1 = t1, t - q * t1
    if r > 1:
        raise NoInverseError(f"{a} has no inverse modulo {n}")
    if t < 0:
        t += n
    return t
