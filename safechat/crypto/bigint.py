# safechat/crypto/bigint.py
"""
Arbitrary precision non-negative integers stored as base-10 digits.

Exports:
 - BigInt (immutable, digits least significant first, zero is empty)
 - BigIntUnderflowError (subtraction below zero)
 - ZERO, ONE, TWO
"""
from functools import total_ordering
from typing import Iterable, Tuple

BASE = 10
INT64_MAX = 2 ** 63 - 1


class BigIntUnderflowError(ArithmeticError):
    """Raised when a subtraction would go below zero. Always a caller bug."""


def _normalize(digits: list) -> tuple:
    while digits and digits[-1] == 0:
        digits.pop()
    return tuple(digits)


@total_ordering
class BigInt:
    __slots__ = ("_digits",)

    def __init__(self, digits: Iterable[int] = ()):
        digits = list(digits)
        for d in digits:
            if not isinstance(d, int) or not 0 <= d < BASE:
                raise ValueError(f"not a base-{BASE} digit: {d!r}")
        self._digits = _normalize(digits)

    @classmethod
    def _raw(cls, digits: list) -> "BigInt":
        obj = cls.__new__(cls)
        obj._digits = _normalize(digits)
        return obj

    # --- conversions ---

    @classmethod
    def from_decimal_string(cls, s: str) -> "BigInt":
        """Parse a plain decimal literal. Only ASCII digits are accepted."""
        if not s or not all("0" <= c <= "9" for c in s):
            raise ValueError(f"invalid decimal literal: {s!r}")
        return cls._raw([ord(c) - 48 for c in reversed(s)])

    @classmethod
    def from_int(cls, n: int) -> "BigInt":
        if n < 0:
            raise ValueError("BigInt cannot hold negative values")
        if n > INT64_MAX:
            raise OverflowError("value exceeds the signed 64-bit range")
        return cls.from_decimal_string(str(n))

    def to_int(self) -> int:
        x = 0
        for d in reversed(self._digits):
            x = x * BASE + d
        if x > INT64_MAX:
            raise OverflowError("value exceeds the signed 64-bit range")
        return x

    def to_decimal_string(self) -> str:
        if not self._digits:
            return "0"
        return "".join(chr(48 + d) for d in reversed(self._digits))

    @property
    def digits(self) -> Tuple[int, ...]:
        return self._digits

    # --- predicates ---

    def is_zero(self) -> bool:
        return not self._digits

    def is_even(self) -> bool:
        return not self._digits or self._digits[0] % 2 == 0

    def compare(self, other: "BigInt") -> int:
        """Return -1, 0 or 1."""
        a, b = self._digits, other._digits
        if len(a) != len(b):
            return 1 if len(a) > len(b) else -1
        for i in range(len(a) - 1, -1, -1):
            if a[i] != b[i]:
                return 1 if a[i] > b[i] else -1
        return 0

    # --- arithmetic ---

    def add(self, other: "BigInt") -> "BigInt":
        a, b = self._digits, other._digits
        if len(a) < len(b):
            a, b = b, a
        out = []
        carry = 0
        for i in range(len(a)):
            s = a[i] + (b[i] if i < len(b) else 0) + carry
            out.append(s % BASE)
            carry = s // BASE
        if carry:
            out.append(carry)
        return BigInt._raw(out)

    def sub(self, other: "BigInt") -> "BigInt":
        """self - other; other must not exceed self."""
        a, b = self._digits, other._digits
        if len(b) > len(a):
            raise BigIntUnderflowError(f"{self} - {other} underflows")
        out = []
        borrow = 0
        for i in range(len(a)):
            s = a[i] - (b[i] if i < len(b) else 0) - borrow
            if s < 0:
                s += BASE
                borrow = 1
            else:
                borrow = 0
            out.append(s)
        if borrow:
            raise BigIntUnderflowError(f"{self} - {other} underflows")
        return BigInt._raw(out)

    def mul(self, other: "BigInt") -> "BigInt":
        a, b = self._digits, other._digits
        if not a or not b:
            return BigInt()
        out = [0] * (len(a) + len(b))
        for i, da in enumerate(a):
            if da == 0:
                continue
            for j, db in enumerate(b):
                out[i + j] += da * db
        carry = 0
        for k in range(len(out)):
            s = out[k] + carry
            out[k] = s % BASE
            carry = s // BASE
        # len(a)+len(b) digits always hold the product
        return BigInt._raw(out)

    def half(self) -> "BigInt":
        """Floor division by two."""
        digits = self._digits
        out = [0] * len(digits)
        rem = 0
        for i in range(len(digits) - 1, -1, -1):
            cur = digits[i] + rem * BASE
            out[i] = cur // 2
            rem = cur % 2
        return BigInt._raw(out)

    def increment(self) -> "BigInt":
        out = list(self._digits)
        i = 0
        while i < len(out) and out[i] == BASE - 1:
            out[i] = 0
            i += 1
        if i == len(out):
            out.append(1)
        else:
            out[i] += 1
        return BigInt._raw(out)

    def decrement(self) -> "BigInt":
        if not self._digits:
            raise BigIntUnderflowError("0 - 1 underflows")
        out = list(self._digits)
        i = 0
        while out[i] == 0:
            out[i] = BASE - 1
            i += 1
        out[i] -= 1
        return BigInt._raw(out)

    def divmod(self, other: "BigInt") -> Tuple["BigInt", "BigInt"]:
        """
        Quotient and remainder by binary search over q in [0, self]:
        the largest q with q*other <= self wins.
        """
        if other.is_zero():
            raise ZeroDivisionError("BigInt division by zero")
        if self.compare(other) < 0:
            return BigInt(), self
        lo, hi = BigInt(), self
        ans = lo
        while lo.compare(hi) <= 0:
            mid = lo.add(hi).half()
            if mid.mul(other).compare(self) <= 0:
                ans = mid
                lo = mid.increment()
            else:
                hi = mid.decrement()
        return ans, self.sub(ans.mul(other))

    # --- python protocol ---

    def __add__(self, other):
        if not isinstance(other, BigInt):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other):
        if not isinstance(other, BigInt):
            return NotImplemented
        return self.sub(other)

    def __mul__(self, other):
        if not isinstance(other, BigInt):
            return NotImplemented
        return self.mul(other)

    def __divmod__(self, other):
        if not isinstance(other, BigInt):
            return NotImplemented
        return self.divmod(other)

    def __floordiv__(self, other):
        if not isinstance(other, BigInt):
            return NotImplemented
        return self.divmod(other)[0]

    def __mod__(self, other):
        if not isinstance(other, BigInt):
            return NotImplemented
        return self.divmod(other)[1]

    def __eq__(self, other):
        if not isinstance(other, BigInt):
            return NotImplemented
        return self._digits == other._digits

    def __lt__(self, other):
        if not isinstance(other, BigInt):
            return NotImplemented
        return self.compare(other) < 0

    def __hash__(self):
        return hash(self._digits)

    def __int__(self):
        return self.to_int()

    def __bool__(self):
        return bool(self._digits)

    def __str__(self):
        return self.to_decimal_string()

    def __repr__(self):
        return f"BigInt({self.to_decimal_string()})"


ZERO = BigInt()
ONE = BigInt.from_int(1)
TWO = BigInt.from_int(2)
