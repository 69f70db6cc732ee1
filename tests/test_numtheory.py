# pylint: disable=missing-module-docstring,redefined-outer-name
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import math
import random

import pytest
import sympy

from rsastream import numtheory
from rsastream.randstate import RandState

M61 = 2**61 - 1
M127 = 2**127 - 1
M521 = 2**521 - 1

base_primetest_cases = [
    # Edge Cases (neither)
    (-7, False),
    (0, False),
    (1, False),
    # Known Primes
    (2, True),
    (3, True),
    (5, True),
    (97, True),
    (101, True),
    (3571, True),
    (7919, True),
    (9973, True),
    # Composite
    (4, False),
    (9, False),
    (100, False),
    (1000000, False),
    # Fermat Pseudoprimes (numbers that fool naive tests)
    (341, False),  # 11 * 31
    (561, False),  # 3 * 11 * 17 (Carmichael number)
    (1105, False),  # 5 * 13 * 17 (Carmichael number)
    # Pseudo-prime (PsP)
    (121, False),
    (703, False),
    (781, False),
    (1541, False),
    (2047, False),
    (52633, False),
]

large_primetest_cases = [
    (M61, True),
    (M127, True),
    (M521, True),
    pytest.param(2**4423 - 1, True, marks=pytest.mark.slow, id="LargeInt-4423bits"),
    (M61 * M127, False),
    (M127 * M521, False),
    (M127 * 3, False),
    (M521 + 2, False),
    (M127 * M127, False),
]


def id_generator(param):
    if isinstance(param, int) and param > 1000000:
        return f"LargeInt-{param.bit_length()}bits"
    return str(param)


@pytest.mark.parametrize("modulus", [2, 7, 97, M127])
@pytest.mark.parametrize("base", [0, 1, 5, 12345678901234567890, M61])
def test_pow_mod_identities(base, modulus):
    assert numtheory.pow_mod(base, 0, modulus) == 1
    assert numtheory.pow_mod(base, 1, modulus) == base % modulus


def test_pow_mod_matches_builtin():
    gen = random.Random(7)
    for _ in range(200):
        base = gen.getrandbits(300)
        exponent = gen.getrandbits(300)
        modulus = gen.getrandbits(256) + 2
        assert numtheory.pow_mod(base, exponent, modulus) == pow(base, exponent, modulus)


def test_pow_mod_reduces():
    assert numtheory.pow_mod(5, 0, 1) == 0
    assert numtheory.pow_mod(-3, 3, 7) == pow(-3, 3, 7)


@pytest.mark.parametrize("exponent,modulus", [(-1, 7), (3, 0), (3, -7)])
def test_pow_mod_validates(exponent, modulus):
    with pytest.raises(ValueError):
        numtheory.pow_mod(3, exponent, modulus)


@pytest.mark.parametrize("n,expected", base_primetest_cases + large_primetest_cases, ids=id_generator)
def test_is_prime(rng, n, expected):
    assert numtheory.is_prime(n, 50, rng) == expected


def test_is_prime_witness_range(mocker):
    rng = mocker.Mock(spec=RandState)
    rng.randbelow.return_value = 0
    numtheory.is_prime(7919, 3, rng)
    rng.randbelow.assert_called_with(7919 - 3)
    assert rng.randbelow.call_count == 3


def test_is_prime_strong_liar(mocker):
    # 2047 = 23 * 89 passes Miller-Rabin to base 2, but not to base 3.
    rng = mocker.Mock(spec=RandState)
    rng.randbelow.return_value = 0
    assert numtheory.is_prime(2047, 10, rng)
    rng.randbelow.return_value = 1
    assert not numtheory.is_prime(2047, 10, rng)


def test_is_prime_zero_iterations(rng):
    assert numtheory.is_prime(561, 0, rng)


@pytest.mark.parametrize("bits", [16, 32, 64, 128, pytest.param(512, marks=pytest.mark.slow)])
def test_make_prime(rng, bits):
    p = numtheory.make_prime(bits, 50, rng)
    assert p.bit_length() == bits + 1
    assert sympy.isprime(p)
    assert numtheory.is_prime(p, 50, rng)


def test_make_prime_deterministic():
    with RandState(99) as a, RandState(99) as b:
        assert numtheory.make_prime(96, 20, a) == numtheory.make_prime(96, 20, b)


def test_make_prime_rejects_short(mocker):
    rng = mocker.Mock(spec=RandState)
    rng.randbits.side_effect = [0b0101, 0b1011]
    rng.randbelow.return_value = 0
    # 5 is prime but only 3 bits long.
    assert numtheory.make_prime(3, 5, rng) == 11
    assert rng.randbits.call_count == 2


def test_make_prime_ceiling(mocker, rng):
    mocker.patch("rsastream.numtheory.is_prime", return_value=False)
    with pytest.raises(RuntimeError):
        numtheory.make_prime(64, 10, rng, max_tries=25)
    assert numtheory.is_prime.call_count <= 25


def test_make_prime_validates(rng):
    with pytest.raises(ValueError):
        numtheory.make_prime(-1, 10, rng)


@pytest.mark.parametrize("a,b", [(0, 0), (1, 0), (12, 18), (17, 5), (2**64, 2**40 * 3), (M127 * 6, M127 * 10)])
def test_gcd(a, b):
    assert numtheory.gcd(a, b) == math.gcd(a, b)
    assert numtheory.gcd(a, b) == numtheory.gcd(b, a)
    assert numtheory.gcd(a, 0) == a


@pytest.mark.parametrize("a,n", [(3, 11), (17, 3120), (65537, (M61 - 1) * (M127 - 1)), (10, 7), (1, 2)])
def test_mod_inverse(a, n):
    i = numtheory.mod_inverse(a, n)
    assert 0 <= i < n
    assert (a * i) % n == 1
    assert i == pow(a, -1, n)


@pytest.mark.parametrize("a,n", [(0, 7), (4, 120), (6, 9), (M127, M127 * 3)])
def test_mod_inverse_missing(a, n):
    with pytest.raises(numtheory.NoInverseError):
        numtheory.mod_inverse(a, n)


def test_no_inverse_is_arithmetic():
    assert issubclass(numtheory.NoInverseError, ArithmeticError)
