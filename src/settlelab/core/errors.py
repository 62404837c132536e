"""
Error classes for SettleLab.

This module defines the exceptions raised by the settlement engine. Malformed
*financial* data never raises: rows degrade gracefully by omission. Exceptions
are reserved for invalid configuration, structurally broken ledger files and
failures of the persistence seam.
"""

from __future__ import annotations


class ConfigError(Exception):
    """
    Configuration error during engine setup.

    **Common Causes:**
    - Negative balance tolerance in a ``SettlementContext``
    - Unknown date-range preset name
    - A date range whose start is after its end

    **Example Usage:**
        ```python
        from settlelab.core.dates import preset_range
        from settlelab.core.errors import ConfigError

        try:
            preset_range("fortnight", today)
        except ConfigError as e:
            print(f"Configuration error: {e}")
        ```
    """

    pass


class LedgerFileError(ValueError):
    """Raised when a ledger file cannot be parsed or has an invalid structure."""


class BalancePersistenceError(Exception):
    """
    Raised when writing a corrected account balance fails.

    Attributes:
        account_id: Account whose balance could not be written
        balance: The corrected balance that was being persisted
    """

    def __init__(self, account_id: str, balance, cause: Exception | None = None):
        self.account_id = account_id
        self.balance = balance
        self.cause = cause
        message = f"[Account {account_id}] failed to persist balance {balance}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
