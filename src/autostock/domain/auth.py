"""Session gate consulted before every mutating store action."""

from dataclasses import dataclass
from typing import Optional

from autostock.domain.entities import Session


@dataclass
class AuthGate:
    """Decide whether a mutating action may run.

    Attributes:
        backend_configured: Whether a real backend is available
        demo_mode: In-memory session without a backend; always permitted
    """

    backend_configured: bool
    demo_mode: bool = False

    def permits(self, session: Optional[Session]) -> bool:
        """Return True if an action may proceed with ``session``.

        Demo mode always permits. Otherwise the only refusal is a missing
        session while a backend is configured.
        """
        if self.demo_mode:
            return True
        if session is None and self.backend_configured:
            return False
        return True

    def allows_remote(self, session: Optional[Session]) -> bool:
        """Return True if the remote phase of an action should run."""
        return not self.demo_mode and session is not None and self.backend_configured
