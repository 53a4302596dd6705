from __future__ import annotations

from typing import Mapping


class SplitLedgerError(Exception):
    pass


class LedgerValidationError(SplitLedgerError, ValueError):
    def __init__(self, errors: Mapping[str, str]) -> None:
        self.errors = dict(errors)
        super().__init__("; ".join(f"{field}: {message}" for field, message in self.errors.items()))


class MembershipError(SplitLedgerError, PermissionError):
    pass
