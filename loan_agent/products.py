"""
Loan Agent - Product Catalog & Guided Call Flow
Loan products the agent pitches, and the five-step call script agents follow
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .intent import LoanType


@dataclass(frozen=True)
class LoanProduct:
    """One loan product as shown to the customer"""
    id: str
    title: str
    apr: str
    turnaround: str
    highlights: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "apr": self.apr,
            "turnaround": self.turnaround,
            "highlights": list(self.highlights),
        }


@dataclass(frozen=True)
class CallFlowStep:
    """One step of the guided call script"""
    id: str
    title: str
    description: str

    def to_dict(self) -> dict:
        return {"id": self.id, "title": self.title, "description": self.description}


# ============ PRODUCTS ============

LOAN_PRODUCTS: Dict[LoanType, LoanProduct] = {
    LoanType.PERSONAL: LoanProduct(
        id="personal",
        title="पर्सनल लोन",
        apr="10.49% से शुरुआत",
        turnaround="24 घंटे में डिस्बर्सल",
        highlights=(
            "₹50,000 से ₹30 लाख तक",
            "नो-कोलेटरल, त्वरित प्रक्रिया",
            "शीघ्र ईएमआई कैलकुलेटर और तुलना",
        ),
    ),
    LoanType.BUSINESS: LoanProduct(
        id="business",
        title="बिज़नेस और एमएसएमई लोन",
        apr="9.75% से शुरुआत",
        turnaround="3-5 कार्य दिवस",
        highlights=(
            "वर्किंग कैपिटल और टर्म लोन विकल्प",
            "जीएसटी / बैंक स्टेटमेंट आधारित रीकैडिट",
            "उद्योग-विशेष सलाह",
        ),
    ),
    LoanType.HOME: LoanProduct(
        id="home",
        title="होम लोन",
        apr="8.40% से शुरुआत",
        turnaround="5-7 कार्य दिवस",
        highlights=(
            "30 साल तक टेन्योर",
            "इंस्टेंट प्री-अप्रूवल और दस्तावेज़ सहायता",
            "बैलेंस ट्रांसफर और टॉप-अप सुविधाएँ",
        ),
    ),
}

# Spoken offer line for the pitch stage
OFFER_LINES: Dict[LoanType, str] = {
    LoanType.HOME: "होम लोन पर 8.4% से शुरुआत और 30 साल तक का टेन्योर विकल्प",
    LoanType.BUSINESS: "एमएसएमई और बिज़नेस लोन पर 9.75% से दरें और working capital सुविधाएँ",
    LoanType.PERSONAL: "पर्सनल लोन पर 10.49% से दरें और तुरंत प्री-अप्रूव्ड ऑफ़र",
}


def _resolve(loan_type: Optional[LoanType]) -> LoanType:
    # Unknown/missing falls through to personal
    if loan_type in (LoanType.HOME, LoanType.BUSINESS):
        return loan_type
    return LoanType.PERSONAL


def get_product(loan_type: Optional[LoanType]) -> LoanProduct:
    return LOAN_PRODUCTS[_resolve(loan_type)]


def get_offer_line(loan_type: Optional[LoanType]) -> str:
    return OFFER_LINES[_resolve(loan_type)]


# ============ GUIDED CALL FLOW ============

CALL_FLOW_STEPS: Tuple[CallFlowStep, ...] = (
    CallFlowStep(
        id="greet",
        title="1. गर्मजोशी से अभिवादन",
        description="ग्राहक का नाम पुष्ट करें, विशफिन का भरोसेमंद परिचय दें और जरूरत समझने का आग्रह करें।",
    ),
    CallFlowStep(
        id="qualify",
        title="2. योग्यता जाँच",
        description="आय, रोजगार और लोन उद्देश्य पूछें ताकि उपयुक्त उत्पाद मैच किए जा सकें।",
    ),
    CallFlowStep(
        id="pitch",
        title="3. व्यक्तिगत ऑफ़र",
        description="ब्याज दर, ईएमआई और पुनर्भुगतान अवधि समझाते हुए ग्राहक की जरूरत के साथ जोड़ें।",
    ),
    CallFlowStep(
        id="assure",
        title="4. दस्तावेज़ और भरोसा",
        description="दस्तावेज़ सूची साझा करें, डेटा सुरक्षा और विशफिन की बैंकिंग साझेदारियों की जानकारी दें।",
    ),
    CallFlowStep(
        id="close",
        title="5. कॉल टू एक्शन",
        description="लिंक भेजें, आवेदन ड्राफ्ट करें और फॉलो-अप का आश्वासन दें ताकि रूपांतरण सुनिश्चित हो।",
    ),
)

# Conversation stage value -> call flow step id
STAGE_TO_STEP = {
    "introduction": "greet",
    "qualification": "qualify",
    "need_analysis": "qualify",
    "pitch": "pitch",
    "documents": "assure",
    "closing": "close",
}


def step_for_stage(stage) -> Optional[CallFlowStep]:
    """Which script step the agent is on. None for fallback."""
    stage_value = getattr(stage, "value", stage)
    step_id = STAGE_TO_STEP.get(stage_value)
    for step in CALL_FLOW_STEPS:
        if step.id == step_id:
            return step
    return None
