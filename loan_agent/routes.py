"""
Loan Agent API Routes
Conversation turns, intent debugging, catalog data and follow-up message previews.
Messages are only rendered here - delivery to an SMS/WhatsApp provider happens elsewhere.
"""

import logging
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import Optional, Dict, Any

from .config import settings
from .conversation import ConversationContext, advance
from .intent import classify
from .products import CALL_FLOW_STEPS, LOAN_PRODUCTS
from .session import session_manager, SessionNotFound
from .templates import (
    MESSAGE_TEMPLATES,
    TemplateError,
    fill_template,
    require_template,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["agent"])


# ============ PYDANTIC MODELS ============

class StartConversationRequest(BaseModel):
    customer_phone: Optional[str] = None

class TurnRequest(BaseModel):
    utterance: str = ""

class ReplyRequest(BaseModel):
    utterance: str = ""
    context: Optional[Dict[str, Any]] = None

class IntentRequest(BaseModel):
    utterance: str = ""

class MessagePreviewRequest(BaseModel):
    phone: Optional[str] = None
    template_id: Optional[str] = None
    variables: Optional[Dict[str, Any]] = None


# ============ CONVERSATIONS ============

@router.post("/conversations")
async def start_conversation(data: StartConversationRequest):
    """Start a new conversation and return the greeting"""
    session, start = await session_manager.create_session(customer_phone=data.customer_phone)
    return {
        "session_id": session.session_id,
        **start.to_dict(),
    }


@router.post("/conversations/{session_id}/turns")
async def conversation_turn(session_id: str, data: TurnRequest):
    """Feed one customer utterance to a live conversation"""
    try:
        response = await session_manager.record_turn(session_id, data.utterance)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Conversation not found")

    return {"session_id": session_id, **response.to_dict()}


@router.get("/conversations/{session_id}")
async def get_conversation(session_id: str):
    try:
        session = await session_manager.get_session(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return session.to_dict()


@router.delete("/conversations/{session_id}")
async def end_conversation(session_id: str):
    try:
        session = await session_manager.end_session(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return {"ended": True, **session.to_dict()}


@router.get("/conversations")
async def list_conversations():
    return {"conversations": await session_manager.get_active_sessions()}


@router.post("/reply")
async def stateless_reply(data: ReplyRequest):
    """
    One turn with a caller-held context (browser keeps the state).
    Missing context starts from the introduction stage.
    """
    previous = ConversationContext.from_dict(data.context or {})
    return advance(data.utterance, previous).to_dict()


@router.post("/intent")
async def detect_intent(data: IntentRequest):
    """Debug view of what the extractor sees in an utterance"""
    return classify(data.utterance).to_dict()


# ============ CATALOG ============

@router.get("/products")
async def list_products():
    return {"products": [p.to_dict() for p in LOAN_PRODUCTS.values()]}


@router.get("/call-flow")
async def call_flow():
    return {"steps": [s.to_dict() for s in CALL_FLOW_STEPS]}


@router.get("/templates")
async def list_templates():
    return {"templates": [t.to_dict() for t in MESSAGE_TEMPLATES]}


# ============ FOLLOW-UP MESSAGES ============

@router.post("/messages/preview")
async def preview_message(data: MessagePreviewRequest):
    """Render a follow-up template for a customer without sending it"""
    if not data.phone:
        raise HTTPException(status_code=400, detail="फोन नंबर आवश्यक है।")
    if not data.template_id:
        raise HTTPException(status_code=400, detail="टेम्पलेट आईडी आवश्यक है।")

    try:
        template = require_template(data.template_id)
    except TemplateError as e:
        raise HTTPException(status_code=400, detail=str(e))

    # Only plain string values are accepted as placeholder values
    variables = {
        key: value for key, value in (data.variables or {}).items()
        if isinstance(value, str)
    }
    variables.setdefault("link", settings.follow_up_link)

    body = fill_template(template, variables)
    logger.info(f"Rendered {template.id} preview for {data.phone}")

    return {
        "preview": True,
        "channel": template.channel.value,
        "template_id": template.id,
        "preview_body": body,
    }
