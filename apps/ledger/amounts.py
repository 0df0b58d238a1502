"""Tolerant comparisons of ledger amounts."""

from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings

CENT = Decimal('0.01')


def tolerance():
    return Decimal(settings.LEDGER_AMOUNT_TOLERANCE)


def quantize(amount):
    """Round to whole cents."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def amounts_equal(a, b):
    """True when the difference is within the ledger tolerance."""
    return abs(Decimal(a) - Decimal(b)) <= tolerance()


def is_zero_sum(amounts):
    return amounts_equal(sum((Decimal(a) for a in amounts), Decimal('0.00')), 0)
