"""Signed 64-bit integer helpers."""
import math

INT64_MIN: int = -(2 ** 63)
INT64_MAX: int = 2 ** 63 - 1
UINT64_MODULUS: int = 2 ** 64


def is_int64(x: object) -> bool:
    """
    Check that a value is a plain integer in the signed 64-bit range.

    Booleans are rejected even though ``bool`` subclasses ``int``.

    :param object x: Value to check

    :return: True if x can be stored in a signed 64-bit integer
    :rtype: bool
    """
    return isinstance(x, int) and not isinstance(x, bool) and INT64_MIN <= x <= INT64_MAX


def wrap_int64(x: int) -> int:
    """
    Wrap an integer into the signed 64-bit range, two's complement style.

    :param int x: Any integer

    :return: x reduced modulo 2**64 into [INT64_MIN, INT64_MAX]
    :rtype: int
    """
    x %= UINT64_MODULUS
    if x > INT64_MAX:
        x -= UINT64_MODULUS
    return x


def isqrt(x: int) -> int:
    """
    Unsigned integer square root of a 64-bit value.

    Negative inputs are read as their unsigned 64-bit counterpart,
    so ``isqrt(-1)`` is ``isqrt(2**64 - 1) == 2**32 - 1``.
    The result always fits in a signed 64-bit integer.

    :param int x: Signed 64-bit integer

    :return: floor(sqrt(x)) of the unsigned reading of x
    :rtype: int
    :raises TypeError: If x is not an integer
    """
    if not isinstance(x, int) or isinstance(x, bool):
        raise TypeError(f"isqrt expects an integer, got {type(x).__name__}")
    return math.isqrt(x % UINT64_MODULUS)
