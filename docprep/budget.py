"""Per-walk budget accounting."""

from __future__ import annotations

from .models import SelectionLimits


class BudgetEnforcer:
    """Tracks accepted files and bytes against the selection ceilings.

    One instance serves exactly one walk. Walks are single-threaded, so the
    counters are updated without locking.
    """

    def __init__(self, limits: SelectionLimits) -> None:
        self.limits = limits
        self.accepted_count = 0
        self.accepted_bytes = 0

    @property
    def exhausted(self) -> bool:
        """True once either the file-count or aggregate-byte ceiling is reached."""
        return (
            self.accepted_count >= self.limits.max_files
            or self.accepted_bytes >= self.limits.total_max_bytes
        )

    def can_admit(self, size: int) -> bool:
        if size > self.limits.per_file_max_bytes:
            return False
        if self.accepted_bytes + size > self.limits.total_max_bytes:
            return False
        if self.accepted_count >= self.limits.max_files:
            return False
        return True

    def try_admit(self, size: int) -> bool:
        """Charge ``size`` against the budget, returning False when it does not fit."""
        if not self.can_admit(size):
            return False
        self.accepted_count += 1
        self.accepted_bytes += size
        return True


__all__ = ["BudgetEnforcer"]
