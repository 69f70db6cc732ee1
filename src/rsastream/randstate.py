"""Seeded random state used by primality testing and key generation.

Wraps a Mersenne-Twister generator behind an explicit object, so that every function needing randomness gets it
handed in. Two states seeded alike produce identical draws, which is what keeps keygen reproducible under a fixed
seed.

Typical usage example:

    with RandState(2025) as rng:
        p = make_prime(128, 50, rng)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import random
import time


class RandState:
    """A seeded Mersenne-Twister random state.

    Not thread-safe, callers sharing one instance across threads must lock around it themselves.

    Attributes:
        seed: The seed the state was last initialized with.
    """

    def __init__(self, seed: int | None = None) -> None:
        self.seed: int | None = None
        self._gen: random.Random | None = None
        self.init(seed)

    def init(self, seed: int | None = None) -> None:
        """(Re)initializes the state.

        Args:
            seed: The seed to use. Defaults to the current time in seconds.
        """
        if seed is None:
            seed = int(time.time())
        self.seed = seed
        self._gen = random.Random(seed)

    def clear(self) -> None:
        """Releases the generator. Any further draw raises until `init` is called again."""
        self._gen = None

    @property
    def active(self) -> bool:
        return self._gen is not None

    def _require(self) -> random.Random:
        if self._gen is None:
            raise RuntimeError("Random state used after being cleared.")
        return self._gen

    def randbits(self, bits: int) -> int:
        """Draws a uniformly random integer in `[0, 2**bits)`."""
        return self._require().getrandbits(bits)

    def randbelow(self, bound: int) -> int:
        """Draws a uniformly random integer in `[0, bound)`.

        Raises:
            ValueError: If `bound` is not positive.
        """
        if bound <= 0:
            raise ValueError("bound must be > 0")
        return self._require().randrange(bound)

    def __enter__(self) -> "RandState":
        return self

    def __exit__(self, *exc) -> None:
        self.clear()
