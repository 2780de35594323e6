"""Engine error taxonomy.

Skips (no user, no rules, duplicate badge) are not errors and never raise.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class for rule engine failures."""

    retryable: bool = False


class StorageUnavailableError(EngineError):
    """The store failed mid-event; nothing was committed and the caller may retry."""

    retryable = True

    def __init__(self, message: str, *, user_id: str | None = None) -> None:
        super().__init__(message)
        self.user_id = user_id


class LedgerInconsistencyError(EngineError):
    """A user's stored XP or level disagrees with the ledger (broken invariant)."""

    def __init__(self, user_id: str, stored_xp: int, ledger_xp: int, stored_level: int, expected_level: int) -> None:
        super().__init__(
            f"User {user_id}: xp={stored_xp} (ledger sum {ledger_xp}), "
            f"level={stored_level} (expected {expected_level})"
        )
        self.user_id = user_id
        self.stored_xp = stored_xp
        self.ledger_xp = ledger_xp
        self.stored_level = stored_level
        self.expected_level = expected_level
