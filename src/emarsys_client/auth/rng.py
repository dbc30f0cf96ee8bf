"""Seedable nonce generator.

An additive lagged Fibonacci generator (Mitchell and Reeds),
``x[n] = x[n-607] + x[n-273] mod 2**64``, seeded the same way as Go's
``math/rand`` source. Other Emarsys clients built on that source produce
the same nonce for the same clock instant, so fixed-clock headers can be
compared byte for byte across client implementations.

Not thread-safe and not suitable for secrets.
"""

from ._rng_cooked import RNG_COOKED

RNG_LEN = 607
RNG_TAP = 273
INT32_MAX = (1 << 31) - 1

_MASK64 = (1 << 64) - 1
_MASK63 = (1 << 63) - 1
_ZERO_SEED = 89482311


def _seedrand(x: int) -> int:
    # x[n+1] = 48271 * x[n] mod (2**31 - 1)
    return (48271 * x) % INT32_MAX


def _to_int64(value: int) -> int:
    return ((value + (1 << 63)) & _MASK64) - (1 << 63)


class LaggedFibonacciSource:
    """Deterministic 63-bit integer source.

    :param seed: Initial seed, taken as a signed 64-bit integer
    :type seed: int
    """

    def __init__(self, seed: int = 0):
        self._vec = [0] * RNG_LEN
        self._tap = 0
        self._feed = 0
        self.seed(seed)

    def seed(self, seed: int) -> None:
        """Reset the generator to the state derived from ``seed``.

        Only ``seed mod (2**31 - 1)`` matters; a zero remainder is replaced
        by a fixed non-zero seed.
        """
        self._tap = 0
        self._feed = RNG_LEN - RNG_TAP

        seed = _to_int64(seed) % INT32_MAX
        if seed == 0:
            seed = _ZERO_SEED

        x = seed
        for i in range(-20, RNG_LEN):
            x = _seedrand(x)
            if i >= 0:
                u = x << 40
                x = _seedrand(x)
                u ^= x << 20
                x = _seedrand(x)
                u ^= x
                u ^= RNG_COOKED[i]
                self._vec[i] = u & _MASK64

    def uint64(self) -> int:
        """Return the next value as an unsigned 64-bit integer."""
        self._tap -= 1
        if self._tap < 0:
            self._tap += RNG_LEN

        self._feed -= 1
        if self._feed < 0:
            self._feed += RNG_LEN

        x = (self._vec[self._feed] + self._vec[self._tap]) & _MASK64
        self._vec[self._feed] = x
        return x

    def int63(self) -> int:
        """Return the next value as a non-negative 63-bit integer."""
        return self.uint64() & _MASK63
