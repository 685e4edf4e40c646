"""
Ledger errors.

Every rejected ledger operation raises one of these.  They describe
caller mistakes, not transient faults: nothing retries them and the
ledger is left exactly as it was before the call.
"""

from __future__ import annotations


class LedgerError(ValueError):
    """Base class for rejected ledger operations.

    `reason` is a stable machine-readable code for the failure.
    """

    reason = "ledger_error"


class InvalidQuantity(LedgerError):
    reason = "invalid_quantity"


class InvalidAmount(LedgerError):
    reason = "invalid_amount"


class InvalidPrice(LedgerError):
    reason = "invalid_price"


class InsufficientFunds(LedgerError):
    reason = "insufficient_funds"


class InsufficientQuantity(LedgerError):
    reason = "insufficient_quantity"


class NoSuchHolding(LedgerError):
    reason = "no_such_holding"
