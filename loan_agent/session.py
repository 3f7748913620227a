"""
Loan Agent Conversation Session Manager
Tracks live conversations in memory (lost on restart) and threads each
customer utterance through the state machine
"""

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, field
import logging

from .config import settings
from .conversation import (
    ABSORBING_STAGES,
    AgentResponse,
    ConversationContext,
    advance,
    initial_agent_state,
)
from .products import step_for_stage
from .templates import follow_up_variables

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SessionNotFound(Exception):
    """No live conversation with this id"""


@dataclass
class ConversationSession:
    """Represents one live conversation"""
    session_id: str
    context: ConversationContext
    customer_phone: Optional[str] = None
    transcript: list = field(default_factory=list)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    def add_transcript(self, speaker: str, text: str):
        self.transcript.append({
            "speaker": speaker,
            "text": text,
            "timestamp": _now().isoformat(),
        })
        if len(self.transcript) > settings.max_transcript_turns:
            self.transcript = self.transcript[-settings.max_transcript_turns:]

    def to_dict(self) -> dict:
        step = step_for_stage(self.context.stage)
        return {
            "session_id": self.session_id,
            "customer_phone": self.customer_phone,
            "stage": self.context.stage.value,
            "call_step": step.to_dict() if step else None,
            "context": self.context.to_dict(),
            "finished": self.context.stage in ABSORBING_STAGES,
            "follow_up": follow_up_variables(self.context) if self.context.follow_up_needed else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "transcript": list(self.transcript),
        }


class ConversationSessionManager:
    """Manages all live conversation sessions"""

    def __init__(self):
        self._sessions: Dict[str, ConversationSession] = {}
        self._lock = asyncio.Lock()

    async def create_session(self, customer_phone: str = None) -> Tuple[ConversationSession, AgentResponse]:
        """Start a conversation and return it with the greeting turn"""
        session_id = str(uuid.uuid4())[:8]

        # Normalize Indian mobile numbers to E.164
        if customer_phone and not customer_phone.startswith("+"):
            digits = customer_phone.replace("-", "").replace(" ", "").replace("(", "").replace(")", "")
            customer_phone = f"+91{digits}" if len(digits) == 10 else f"+{digits}"

        start = initial_agent_state()
        session = ConversationSession(
            session_id=session_id,
            context=start.context,
            customer_phone=customer_phone,
        )
        session.add_transcript("agent", start.reply)

        async with self._lock:
            self._sessions[session_id] = session

        logger.info(f"Created conversation {session_id}" + (f" for {customer_phone}" if customer_phone else ""))
        return session, start

    async def get_session(self, session_id: str) -> ConversationSession:
        session = self._sessions.get(session_id)
        if not session:
            raise SessionNotFound(session_id)
        return session

    async def record_turn(self, session_id: str, utterance: str) -> AgentResponse:
        """Run one customer utterance through the state machine and store the result"""
        session = await self.get_session(session_id)

        async with self._lock:
            response = advance(utterance, session.context)
            previous_stage = session.context.stage
            session.context = response.context
            session.updated_at = _now()
            if utterance.strip():
                session.add_transcript("customer", utterance.strip())
            session.add_transcript("agent", response.reply)

        if response.stage != previous_stage:
            logger.info(f"Conversation {session_id}: {previous_stage.value} -> {response.stage.value}")
        return response

    async def end_session(self, session_id: str) -> ConversationSession:
        """Remove a conversation and return its final snapshot"""
        async with self._lock:
            session = self._sessions.pop(session_id, None)
        if not session:
            raise SessionNotFound(session_id)

        logger.info(
            f"Conversation {session_id} ended at {session.context.stage.value}, "
            f"follow-up: {session.context.follow_up_needed}"
        )
        return session

    async def get_active_sessions(self) -> List[dict]:
        """All conversations that have not reached closing/fallback"""
        return [
            s.to_dict() for s in self._sessions.values()
            if s.context.stage not in ABSORBING_STAGES
        ]


# Global session manager instance
session_manager = ConversationSessionManager()
