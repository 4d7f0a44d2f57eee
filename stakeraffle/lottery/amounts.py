"""Checked integer arithmetic for ledger amounts."""

from __future__ import annotations

from ..errors import ArithmeticOverflowError, ArithmeticUnderflowError

MAX_LEDGER_AMOUNT = 2**63 - 1
"""Largest value an amount column can hold (signed 64-bit storage)."""

U64_MASK = 2**64 - 1


def checked_add(left: int, right: int) -> int:
    result = left + right
    if result > MAX_LEDGER_AMOUNT:
        raise ArithmeticOverflowError(
            f"Arithmetic overflow: {left} + {right} exceeds {MAX_LEDGER_AMOUNT}"
        )
    return result


def checked_sub(left: int, right: int) -> int:
    if right > left:
        raise ArithmeticUnderflowError(f"Arithmetic underflow: {left} - {right}")
    return left - right


def saturating_sub(left: int, right: int) -> int:
    return left - right if left > right else 0


def wrapping_add(left: int, right: int) -> int:
    return (left + right) & U64_MASK


def wrapping_mul(left: int, right: int) -> int:
    return (left * right) & U64_MASK


__all__ = [
    "MAX_LEDGER_AMOUNT",
    "U64_MASK",
    "checked_add",
    "checked_sub",
    "saturating_sub",
    "wrapping_add",
    "wrapping_mul",
]
