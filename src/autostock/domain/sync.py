"""Two-phase mutation contract and remote-failure reconciliation.

Every mutating store action applies its change locally first and then
attempts the matching remote write. The outcome of that second phase is
reported as a ``SyncResult``; what to do about a failure is decided by a
``SyncStrategy`` so call sites never change when the policy does.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SyncStatus(str, Enum):
    """Outcome of the remote phase of a mutation."""

    SYNCED = "synced"
    FAILED = "failed"
    # No remote write attempted: demo mode, no session, or backend not configured
    SKIPPED = "skipped"
    # Auth gate refused the action; nothing was applied
    DENIED = "denied"


@dataclass(frozen=True)
class SyncResult:
    """Result of the remote phase of one store action."""

    action: str
    status: SyncStatus
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status in (SyncStatus.SYNCED, SyncStatus.SKIPPED)


@dataclass(frozen=True)
class Mutation(Generic[T]):
    """Value returned by every mutating store action.

    ``applied`` is what the local phase produced (the new or updated entity,
    or the removed one for deletes); ``sync`` describes the remote phase.
    """

    applied: Optional[T]
    sync: SyncResult

    @property
    def denied(self) -> bool:
        return self.sync.status == SyncStatus.DENIED


class SyncStrategy(ABC):
    """Policy applied when the remote phase of a mutation fails."""

    @abstractmethod
    def on_failure(self, action: str, error: Exception, undo: Callable[[], None]) -> None:
        """Handle a failed remote write.

        Args:
            action: Name of the store action
            error: The backend error
            undo: Restores the collections touched by the local phase
        """
        pass


class KeepLocalStrategy(SyncStrategy):
    """Log the failure and keep the optimistic local state."""

    def on_failure(self, action: str, error: Exception, undo: Callable[[], None]) -> None:
        logger.error("Remote sync failed for %s: %s", action, error)


class RollbackStrategy(SyncStrategy):
    """Log the failure and restore the local state from before the action."""

    def on_failure(self, action: str, error: Exception, undo: Callable[[], None]) -> None:
        logger.error("Remote sync failed for %s, rolling back: %s", action, error)
        undo()
