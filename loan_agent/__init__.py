"""
Loan Voice Agent Package
"""

from .config import settings
from .intent import (
    LoanType,
    IntentRules,
    IntentSignals,
    DEFAULT_RULES,
    NEGATIVE_PHRASES,
    DEFER_PHRASES,
    LOAN_TYPE_RULES,
    normalize,
    is_negative,
    is_defer,
    detect_loan_type,
    extract_amount,
    classify,
)
from .conversation import (
    ConversationStage,
    ConversationContext,
    AgentResponse,
    Conversation,
    FUNNEL_ORDER,
    advance,
    build_greeting,
    initial_agent_state,
)
from .products import (
    LoanProduct,
    CallFlowStep,
    LOAN_PRODUCTS,
    CALL_FLOW_STEPS,
    get_product,
    step_for_stage,
)
from .templates import (
    Channel,
    MessageTemplate,
    MESSAGE_TEMPLATES,
    TemplateError,
    fill_template,
    follow_up_variables,
    get_template,
)

__all__ = [
    "settings",
    # Intent detection
    "LoanType",
    "IntentRules",
    "IntentSignals",
    "DEFAULT_RULES",
    "NEGATIVE_PHRASES",
    "DEFER_PHRASES",
    "LOAN_TYPE_RULES",
    "normalize",
    "is_negative",
    "is_defer",
    "detect_loan_type",
    "extract_amount",
    "classify",
    # Conversation State Machine
    "ConversationStage",
    "ConversationContext",
    "AgentResponse",
    "Conversation",
    "FUNNEL_ORDER",
    "advance",
    "build_greeting",
    "initial_agent_state",
    # Products
    "LoanProduct",
    "CallFlowStep",
    "LOAN_PRODUCTS",
    "CALL_FLOW_STEPS",
    "get_product",
    "step_for_stage",
    # Follow-up templates
    "Channel",
    "MessageTemplate",
    "MESSAGE_TEMPLATES",
    "TemplateError",
    "fill_template",
    "follow_up_variables",
    "get_template",
]
