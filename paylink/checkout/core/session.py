"""Checkout session management"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from ..services.orchestrator import CheckoutOrchestrator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CheckoutSession:
    """One payer's view of one payment link"""
    session_id: str
    slug: str
    orchestrator: CheckoutOrchestrator
    created_at: datetime
    updated_at: datetime

    def touch(self) -> None:
        self.updated_at = _utcnow()


class SessionManager:
    """Manages checkout sessions"""

    def __init__(self):
        self.sessions: dict[str, CheckoutSession] = {}

    def create_session(self, orchestrator: CheckoutOrchestrator) -> CheckoutSession:
        """Create a new session around an orchestrator"""
        now = _utcnow()
        session = CheckoutSession(
            session_id=str(uuid.uuid4()),
            slug=orchestrator.slug,
            orchestrator=orchestrator,
            created_at=now,
            updated_at=now,
        )
        self.sessions[session.session_id] = session
        return session

    def get_session(self, session_id: str) -> Optional[CheckoutSession]:
        """Get session by ID"""
        return self.sessions.get(session_id)

    def delete_session(self, session_id: str) -> bool:
        """Delete a session; the retained card attempt goes with it"""
        if session_id in self.sessions:
            del self.sessions[session_id]
            return True
        return False

    def cleanup_old_sessions(self, max_age_hours: int = 24) -> int:
        """Remove sessions older than max_age_hours"""
        now = _utcnow()
        old_sessions = [
            sid for sid, session in self.sessions.items()
            if (now - session.updated_at).total_seconds() > max_age_hours * 3600
        ]
        for sid in old_sessions:
            del self.sessions[sid]
        return len(old_sessions)


# Singleton instance
session_manager = SessionManager()
