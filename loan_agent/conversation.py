"""
Loan Agent - Conversation State Machine
=======================================
Drives the scripted loan-sales call one customer utterance at a time:
- Stage (introduction -> qualification -> need_analysis -> pitch -> documents -> closing)
- Extracted facts (loan type, amount) - first detection wins
- Follow-up flag (send SMS/WhatsApp after the call?)

advance() is a pure function: same (utterance, context) in, same
(reply, context) out. No I/O, no clock, no randomness.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from .config import settings
from .intent import (
    DEFAULT_RULES,
    IntentRules,
    LoanType,
    classify,
)
from .products import get_offer_line

logger = logging.getLogger(__name__)


class ConversationStage(Enum):
    INTRODUCTION = "introduction"
    QUALIFICATION = "qualification"
    NEED_ANALYSIS = "need_analysis"
    PITCH = "pitch"
    DOCUMENTS = "documents"
    CLOSING = "closing"
    FALLBACK = "fallback"


# Sales funnel - stages only ever move forward along this list
FUNNEL_ORDER = [
    ConversationStage.INTRODUCTION,
    ConversationStage.QUALIFICATION,
    ConversationStage.NEED_ANALYSIS,
    ConversationStage.PITCH,
    ConversationStage.DOCUMENTS,
    ConversationStage.CLOSING,
]

# Stages the conversation never leaves
ABSORBING_STAGES = (ConversationStage.CLOSING, ConversationStage.FALLBACK)

# Loan type/amount are only picked up before the offer is made
FACT_GATHERING_STAGES = (
    ConversationStage.INTRODUCTION,
    ConversationStage.QUALIFICATION,
    ConversationStage.NEED_ANALYSIS,
    ConversationStage.PITCH,
)


def _stage_name(stage) -> str:
    return getattr(stage, "value", str(stage))


# ============ REPLIES ============

CLARIFY_REPLY = (
    "माफ़ कीजिएगा, मैं आपको ठीक से सुन नहीं पाई। क्या आप दोबारा बता सकते हैं "
    "कि आपको किस तरह की वित्तीय सहायता चाहिए?"
)
OPT_OUT_REPLY = (
    "कोई बात नहीं, मैं आपका नंबर नोट कर लेती हूँ और आगे आपको परेशान नहीं किया जाएगा। "
    "अगर कभी भविष्य में सहायता चाहिए तो विशफिन डॉट कॉम पर ज़रूर याद कीजिएगा। आपका दिन शुभ हो!"
)
DEFER_REPLY = (
    "समझ सकती हूँ कि अभी व्यस्त होंगे। मैं एक संक्षिप्त संदेश और व्हाट्सएप में विवरण भेज देती हूँ "
    "ताकि आप अपनी सुविधा से देख सकें। क्या मैं आपके लिए किसी विशेष समय का नोट बना दूँ?"
)
QUALIFICATION_REPLY = (
    "बहुत बढ़िया! थोड़ी जानकारी साझा करिए ताकि मैं आपके लिए सटीक ऑफ़र निकाल सकूँ। "
    "आप किस उद्देश्य के लिए लोन लेना चाह रहे हैं और आपकी मासिक नेट आय कितनी है?"
)
NEED_ANALYSIS_REPLY = (
    "धन्यवाद! आपकी आय और आवश्यकता के आधार पर मैं तुरंत वैरीफाइड पार्टनर बैंकों से ऑफ़र मैच कर दूँगी। "
    "क्या आपके पास आधार, पैन और आय का प्रमाण उपलब्ध है?"
)
PITCH_REPLY = (
    "उत्तम! दस्तावेज़ तैयार हैं तो प्रक्रिया बहुत तेज़ हो जाएगी। "
    "मैं आपको ब्याज दर, ईएमआई और डिस्बर्सल टाइमलाइन का पूरा विवरण अभी भेज रही हूँ।"
)
OFFER_REPLY = (
    "{loan_detail}{offer} उपलब्ध है। ईएमआई कैलकुलेशन और दस्तावेज़ अपलोड लिंक मैं अभी भेजती हूँ। "
    "क्या मैं आवेदन ड्राफ्ट शुरू कर दूँ?"
)
DOCUMENTS_REPLY = (
    "बहुत बढ़िया! आवेदन ड्राफ्ट कर दिया है। अभी मैं आपको एसएमएस और व्हाट्सएप पर लिंक भेज रही हूँ "
    "जहाँ से आप दस्तावेज़ अपलोड कर सकते हैं।"
)
THANK_YOU_REPLY = (
    "धन्यवाद! विशफिन पर भरोसा करने के लिए शुक्रिया। किसी भी समय सवाल हो तो इसी कॉल "
    "या व्हाट्सएप संदेश का जवाब दे दीजिएगा।"
)
FALLBACK_REPLY = "मैंने आपकी बात नोट कर ली है। अगर कोई और जानकारी चाहिए तो बेझिझक बताइए।"


# ============ DATA CLASSES ============

@dataclass(frozen=True)
class ConversationContext:
    """
    Everything carried from one turn to the next.

    Never mutated in place - each turn returns a new instance.
    customer_name is reserved: nothing in the extractor fills it yet.
    """
    stage: ConversationStage = ConversationStage.INTRODUCTION
    customer_name: Optional[str] = None
    loan_type: Optional[LoanType] = None
    amount: Optional[str] = None
    follow_up_needed: Optional[bool] = None

    def to_dict(self) -> dict:
        return {
            "stage": self.stage.value,
            "customer_name": self.customer_name,
            "loan_type": self.loan_type.value if self.loan_type else None,
            "amount": self.amount,
            "follow_up_needed": self.follow_up_needed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ConversationContext":
        """
        Rebuild a context sent back by a client.

        A missing stage means INTRODUCTION; any other unrecognised stage tag
        (including "" or null) becomes FALLBACK. Loan type tags that are not a
        concrete category are dropped, so detection can still fill them.
        """
        stage_value = data.get("stage", ConversationStage.INTRODUCTION.value)
        try:
            stage = ConversationStage(stage_value)
        except ValueError:
            logger.warning(f"Unrecognised stage '{stage_value}', treating as fallback")
            stage = ConversationStage.FALLBACK

        loan_type = None
        if data.get("loan_type"):
            try:
                loan_type = LoanType(data["loan_type"])
            except ValueError:
                logger.warning(f"Unrecognised loan type '{data['loan_type']}', ignoring")
        if loan_type == LoanType.UNKNOWN:
            loan_type = None

        return cls(
            stage=stage,
            customer_name=data.get("customer_name"),
            loan_type=loan_type,
            amount=data.get("amount"),
            follow_up_needed=data.get("follow_up_needed"),
        )


@dataclass(frozen=True)
class AgentResponse:
    """One agent turn: what to say and the context for the next call"""
    reply: str
    stage: ConversationStage
    context: ConversationContext

    def to_dict(self) -> dict:
        return {
            "reply": self.reply,
            "stage": self.stage.value,
            "context": self.context.to_dict(),
        }


# ============ INITIAL STATE ============

def build_greeting(context: ConversationContext) -> str:
    base_name = f"{context.customer_name} जी" if context.customer_name else "जी"
    return (
        f"नमस्ते {base_name}, मैं {settings.brand_name} से {settings.agent_name} बोल रही हूँ। "
        "हम आपको सबसे उपयुक्त लोन दिलाने में मदद करते हैं। "
        "क्या मैं आपकी वित्तीय ज़रूरत के बारे में थोड़ा जान सकती हूँ?"
    )


def initial_agent_state() -> AgentResponse:
    """Seed a new conversation: introduction stage plus the greeting"""
    context = ConversationContext(stage=ConversationStage.INTRODUCTION)
    return AgentResponse(
        reply=build_greeting(context),
        stage=ConversationStage.INTRODUCTION,
        context=context,
    )


# ============ STAGE HANDLERS ============
# Each handler gets the previous context (with loan_type/amount already
# merged in) and returns (reply, next context).

StageHandler = Callable[[ConversationContext], Tuple[str, ConversationContext]]


def _handle_introduction(context: ConversationContext) -> Tuple[str, ConversationContext]:
    return QUALIFICATION_REPLY, replace(context, stage=ConversationStage.QUALIFICATION)


def _handle_qualification(context: ConversationContext) -> Tuple[str, ConversationContext]:
    return NEED_ANALYSIS_REPLY, replace(context, stage=ConversationStage.NEED_ANALYSIS)


def _handle_need_analysis(context: ConversationContext) -> Tuple[str, ConversationContext]:
    return PITCH_REPLY, replace(context, stage=ConversationStage.PITCH)


def _handle_pitch(context: ConversationContext) -> Tuple[str, ConversationContext]:
    if context.amount:
        loan_detail = f"आपके बताए हुए {context.amount} के लिए "
    else:
        loan_detail = "आपकी आवश्यकता के लिए "

    reply = OFFER_REPLY.format(loan_detail=loan_detail, offer=get_offer_line(context.loan_type))
    return reply, replace(context, stage=ConversationStage.DOCUMENTS)


def _handle_documents(context: ConversationContext) -> Tuple[str, ConversationContext]:
    return DOCUMENTS_REPLY, replace(
        context, stage=ConversationStage.CLOSING, follow_up_needed=True
    )


def _handle_closing(context: ConversationContext) -> Tuple[str, ConversationContext]:
    return THANK_YOU_REPLY, context


def _handle_fallback(context: ConversationContext) -> Tuple[str, ConversationContext]:
    return FALLBACK_REPLY, replace(context, stage=ConversationStage.FALLBACK)


STAGE_HANDLERS: Dict[ConversationStage, StageHandler] = {
    ConversationStage.INTRODUCTION: _handle_introduction,
    ConversationStage.QUALIFICATION: _handle_qualification,
    ConversationStage.NEED_ANALYSIS: _handle_need_analysis,
    ConversationStage.PITCH: _handle_pitch,
    ConversationStage.DOCUMENTS: _handle_documents,
    ConversationStage.CLOSING: _handle_closing,
    ConversationStage.FALLBACK: _handle_fallback,
}


# ============ MAIN TRANSITION ============

def advance(
    utterance: str,
    previous: ConversationContext,
    rules: IntentRules = DEFAULT_RULES,
) -> AgentResponse:
    """
    Compute the agent's next reply and context.

    Priority:
    1. Empty utterance      -> ask again, context untouched
    2. Negative intent      -> closing, no follow-up (from ANY stage)
    3. Defer intent         -> closing, follow-up (from ANY stage)
    4. Otherwise merge loan type/amount and run the stage handler
    """
    signals = classify(utterance, rules)

    if not signals.normalized:
        return AgentResponse(reply=CLARIFY_REPLY, stage=previous.stage, context=previous)

    if signals.negative:
        context = replace(previous, stage=ConversationStage.CLOSING, follow_up_needed=False)
        logger.debug(f"Opt-out from {_stage_name(previous.stage)}: {signals.matched_phrases}")
        return AgentResponse(reply=OPT_OUT_REPLY, stage=context.stage, context=context)

    if signals.defer:
        context = replace(previous, stage=ConversationStage.CLOSING, follow_up_needed=True)
        logger.debug(f"Deferred from {_stage_name(previous.stage)}: {signals.matched_phrases}")
        return AgentResponse(reply=DEFER_REPLY, stage=context.stage, context=context)

    merged = previous
    if previous.stage in FACT_GATHERING_STAGES:
        loan_type = previous.loan_type
        # Only a concrete category is ever stored; once stored it never changes
        if loan_type is None and signals.loan_type != LoanType.UNKNOWN:
            loan_type = signals.loan_type
        amount = previous.amount if previous.amount else signals.amount
        merged = replace(previous, loan_type=loan_type, amount=amount)

    handler = STAGE_HANDLERS.get(previous.stage, _handle_fallback)
    reply, context = handler(merged)

    if context.stage != previous.stage:
        logger.debug(f"Stage {_stage_name(previous.stage)} -> {_stage_name(context.stage)}")

    return AgentResponse(reply=reply, stage=context.stage, context=context)


# ============ CONVERSATION DRIVER ============

class Conversation:
    """
    Holds one running conversation for a caller loop.

    Usage:
        convo = Conversation()
        print(convo.greeting)
        response = convo.respond("मुझे personal loan चाहिए 5 लाख का")
        response.context.loan_type  # LoanType.PERSONAL
    """

    def __init__(self, rules: IntentRules = DEFAULT_RULES, max_turns: Optional[int] = None):
        self.rules = rules
        self.max_turns = settings.max_transcript_turns if max_turns is None else max_turns

        start = initial_agent_state()
        self.greeting = start.reply
        self.context = start.context
        self.transcript: List[Tuple[str, str]] = []
        self._add_turn("agent", start.reply)

    @property
    def stage(self) -> ConversationStage:
        return self.context.stage

    @property
    def is_finished(self) -> bool:
        return self.context.stage in ABSORBING_STAGES

    def respond(self, utterance: str) -> AgentResponse:
        """Feed one customer utterance, store the new context, return the turn"""
        response = advance(utterance, self.context, self.rules)
        self.context = response.context

        if utterance.strip():
            self._add_turn("customer", utterance.strip())
        self._add_turn("agent", response.reply)
        return response

    def _add_turn(self, speaker: str, text: str):
        self.transcript.append((speaker, text))
        if len(self.transcript) > self.max_turns:
            self.transcript = self.transcript[len(self.transcript) - self.max_turns:]
