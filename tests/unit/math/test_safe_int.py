"""Tests for SafeInt checked arithmetic."""

import pytest

from kdex.safe_int import (
    UINT32_MAX,
    UINT112_MAX,
    UINT256_MAX,
    DivisionByZero,
    S,
    SafeInt,
    SafeIntError,
    UintOverflow,
    Underflow,
)


class TestSafeIntConstruction:
    """Tests for SafeInt construction."""

    def test_from_int(self):
        """SafeInt can be constructed from int."""
        assert SafeInt(42).value == 42

    def test_from_safeint(self):
        """SafeInt can be constructed from another SafeInt."""
        assert SafeInt(SafeInt(42)).value == 42

    def test_from_invalid_type_raises(self):
        """SafeInt rejects non-integers."""
        with pytest.raises(TypeError):
            SafeInt("42")  # type: ignore
        with pytest.raises(TypeError):
            SafeInt(3.14)  # type: ignore

    def test_rejects_bool(self):
        """Booleans are not amounts."""
        with pytest.raises(TypeError):
            SafeInt(True)  # type: ignore

    def test_alias_s(self):
        """S is an alias for SafeInt."""
        assert S is SafeInt

    def test_zero_constructor(self):
        assert SafeInt.zero().value == 0


class TestSafeIntArithmetic:
    """Tests for SafeInt arithmetic operations."""

    def test_add(self):
        assert (S(10) + S(5)).value == 15
        assert (S(10) + 5).value == 15
        assert (5 + S(10)).value == 15

    def test_sub(self):
        assert (S(10) - S(3)).value == 7
        assert (10 - S(3)).value == 7
        assert (S(5) - 5).value == 0

    def test_sub_underflow_raises(self):
        """Subtraction below zero raises Underflow."""
        with pytest.raises(Underflow) as exc_info:
            S(5) - S(10)
        assert "5 - 10" in str(exc_info.value)

    def test_rsub_underflow_raises(self):
        with pytest.raises(Underflow):
            5 - S(10)

    def test_mul_large(self):
        """Products beyond 256 bits are exact; width is checked separately."""
        big = 10**40
        assert (S(big) * big).value == big * big

    def test_floordiv(self):
        assert (S(10) // S(3)).value == 3
        assert (S(10) // 3).value == 3

    def test_floordiv_by_zero_raises(self):
        with pytest.raises(DivisionByZero):
            S(10) // 0

    def test_errors_are_arithmetic_errors(self):
        """All SafeInt errors share one base and are ArithmeticErrors."""
        for error in (DivisionByZero, Underflow, UintOverflow):
            assert issubclass(error, SafeIntError)
            assert issubclass(error, ArithmeticError)


class TestSafeIntComparison:
    def test_compares_with_ints_and_safeints(self):
        assert S(5) == 5
        assert S(5) == S(5)
        assert S(3) < 5
        assert S(5) <= S(5)
        assert S(6) > S(5)
        assert S(6) >= 6

    def test_bool(self):
        assert not S(0)
        assert S(1)

    def test_min(self):
        assert S(3).min(5).value == 3
        assert S(7).min(S(5)).value == 5


class TestSafeIntNamedOperations:
    def test_isqrt_floors(self):
        assert S(4 * 10**36).isqrt().value == 2 * 10**18
        assert S(15).isqrt().value == 3

    def test_isqrt_negative_raises(self):
        with pytest.raises(Underflow):
            S(-1).isqrt()

    def test_wrapping_add(self):
        """Addition wraps at the requested width."""
        assert S(UINT32_MAX).wrapping_add(1, 32).value == 0
        assert S(UINT32_MAX).wrapping_add(6, 32).value == 5

    def test_wrapping_sub(self):
        assert S(2).wrapping_sub(5, 32).value == UINT32_MAX - 2

    def test_to_uint_in_range(self):
        assert S(UINT256_MAX).to_uint() == UINT256_MAX
        assert S(UINT112_MAX).to_uint(112) == UINT112_MAX

    def test_to_uint_overflow_raises(self):
        with pytest.raises(UintOverflow):
            S(UINT112_MAX + 1).to_uint(112)
        with pytest.raises(UintOverflow):
            S(-1).to_uint()

    def test_is_uint(self):
        assert S(UINT112_MAX).is_uint(112)
        assert not S(UINT112_MAX + 1).is_uint(112)
        assert not S(-1).is_uint(112)
