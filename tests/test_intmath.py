"""Test the 64-bit integer helpers."""
import pytest

from incremental_calculator.common.intmath import INT64_MAX, INT64_MIN, is_int64, isqrt, wrap_int64


@pytest.mark.parametrize("x,expected", [
    (0, 0),
    (1, 1),
    (15, 3),
    (16, 4),
    (10 ** 18, 10 ** 9),
    (INT64_MAX, 3037000499),
    (-1, 2 ** 32 - 1),
    (INT64_MIN, 3037000499),
])
def test_isqrt(x: int, expected: int) -> None:
    """isqrt is the floor square root of the unsigned 64-bit reading."""
    assert isqrt(x) == expected


@pytest.mark.parametrize("x", [2.0, "4", None, True])
def test_isqrt_rejects_non_integers(x) -> None:
    """Only integers have an integer square root."""
    with pytest.raises(TypeError):
        isqrt(x)


@pytest.mark.parametrize("x,expected", [
    (5, 5),
    (INT64_MAX + 1, INT64_MIN),
    (INT64_MIN - 1, INT64_MAX),
    (2 ** 64, 0),
    (-(2 ** 64) - 3, -3),
])
def test_wrap_int64(x: int, expected: int) -> None:
    """Integers wrap modulo 2**64 into the signed range."""
    assert wrap_int64(x) == expected


@pytest.mark.parametrize("x,expected", [
    (0, True),
    (INT64_MAX, True),
    (INT64_MIN, True),
    (INT64_MAX + 1, False),
    (INT64_MIN - 1, False),
    (False, False),
    (1.0, False),
])
def test_is_int64(x, expected: bool) -> None:
    """Only plain integers in range are 64-bit values."""
    assert is_int64(x) is expected
