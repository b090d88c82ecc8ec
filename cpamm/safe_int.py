"""Checked integer wrapper for pool arithmetic.

Every pool counter is a non-negative integer bounded by uint256. SafeInt
makes each step that produces a counter fail loudly instead of yielding a
value the ledger could never hold:
- Subtraction below zero raises Underflow
- Addition past UINT256_MAX raises Uint256Overflow
- Division by zero in mul_div raises DivisionByZero

Pro-rata terms (shares * reserve // total and friends) go through mul_div.
The product is formed at full width and only the quotient is range-checked,
the way on-chain pools use a 512-bit mulDiv. Any ledger the pool accepted
can therefore always be priced and burned.

Usage pattern:
    from cpamm.safe_int import S, mul_div

    def pro_rata(shares: int, reserve: int, total: int) -> int:
        return mul_div(shares, reserve, total).value
"""

from __future__ import annotations

from cpamm.constants import UINT256_MAX


class SafeIntError(ArithmeticError):
    """Base class for SafeInt arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    """Division by zero."""

    pass


class Underflow(SafeIntError):
    """Subtraction would produce negative result."""

    pass


class Uint256Overflow(SafeIntError):
    """Value exceeds uint256 maximum."""

    pass


class SafeInt:
    """Non-negative integer bounded by uint256.

    Construction is range-checked, so addition cannot leave
    [0, UINT256_MAX] and subtraction refuses to go negative.

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        """Create a SafeInt from an integer or another SafeInt.

        Args:
            value: Integer value to wrap, or SafeInt to copy

        Raises:
            TypeError: If value is not an int or SafeInt (bool is rejected)
            Underflow: If value is negative
            Uint256Overflow: If value exceeds UINT256_MAX
        """
        if isinstance(value, SafeInt):
            self._value = value._value
            return
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")
        self._value = _check_range(value)

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    # --- Arithmetic operations ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        """Add two values.

        Raises:
            Uint256Overflow: If the sum exceeds UINT256_MAX
        """
        return SafeInt(self._value + _extract_value(other))

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Subtract other from self.

        Raises:
            Underflow: If result would be negative
        """
        other_val = _extract_value(other)
        result = self._value - other_val
        if result < 0:
            raise Underflow(f"Underflow: {self._value} - {other_val} = {result}")
        return SafeInt(result)

    # --- Named operations ---

    def min(self, other: SafeInt | int) -> SafeInt:
        """Return minimum of self and other."""
        return SafeInt(min(self._value, _extract_value(other)))

    def max(self, other: SafeInt | int) -> SafeInt:
        """Return maximum of self and other."""
        return SafeInt(max(self._value, _extract_value(other)))


def mul_div(a: SafeInt | int, b: SafeInt | int, denominator: SafeInt | int) -> SafeInt:
    """floor(a * b / denominator) with a full-width intermediate product.

    Raises:
        DivisionByZero: If denominator is zero
        Uint256Overflow: If the quotient exceeds UINT256_MAX
    """
    a_val, b_val, d_val = _extract_value(a), _extract_value(b), _extract_value(denominator)
    if d_val == 0:
        raise DivisionByZero(f"Division by zero: {a_val} * {b_val} // 0")
    return SafeInt(a_val * b_val // d_val)


def _check_range(value: int) -> int:
    if value < 0:
        raise Underflow(f"Negative value: {value}")
    if value > UINT256_MAX:
        raise Uint256Overflow(f"Value exceeds uint256 max: {value}")
    return value


def _extract_value(x: SafeInt | int) -> int:
    """Extract integer value from SafeInt or int."""
    if isinstance(x, SafeInt):
        return x._value
    return x


# Convenience alias for concise code
S = SafeInt
