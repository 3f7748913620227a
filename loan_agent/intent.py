"""
Loan Agent Intent Detection
===========================
Keyword classification for customer utterances (Hindi, English, Hinglish)

Architecture:
1. Normalize (trim + lower-case) - all matching runs on this
2. Negative intent ("नहीं", "stop", "नंबर हटाओ") - wins over everything
3. Defer intent ("बाद में", "later", "सोचना") - only if not negative
4. Loan type - first category in declared order with a keyword hit
5. Amount - regex over the ORIGINAL utterance (keeps digit formatting)

Matching is plain substring matching, no word boundaries. "no" also
matches "know" and "time" also matches "sometimes". Treat the result as
an approximate signal, not real language understanding.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


class LoanType(Enum):
    PERSONAL = "personal"
    BUSINESS = "business"
    HOME = "home"
    UNKNOWN = "unknown"


# =============================================================================
# NEGATIVE PHRASES - customer does not want to continue or be contacted
# =============================================================================

NEGATIVE_PHRASES = (
    "नहीं",
    "interested नहीं",
    "मत भेजो",
    "नंबर हटाओ",
    "no",
    "stop",
    "don't",
    "call mat",
    "interest nahi",
)


# =============================================================================
# DEFER PHRASES - customer is busy / wants to think / call later
# =============================================================================

DEFER_PHRASES = (
    "बाद",
    "बाद में",
    "later",
    "time",
    "सोच",
    "सोचना",
)


# =============================================================================
# LOAN TYPE RULES - ORDER MATTERS, first matching category wins
# =============================================================================

LOAN_TYPE_RULES: Tuple[Tuple[LoanType, Tuple[str, ...]], ...] = (
    (LoanType.PERSONAL, ("personal", "पर्सनल", "salary", "सैलरी")),
    (LoanType.BUSINESS, ("business", "बिज़नेस", "व्यापार", "msme")),
    (LoanType.HOME, ("home", "हाउस", "घर", "home loan", "property", "मकान")),
)


# Digit groups with optional comma/space separators, then an optional
# magnitude word: "5 लाख", "2,50,000", "1 crore". करोड़ is accepted with
# both the precomposed and the nukta-combining ड़.
AMOUNT_PATTERN = re.compile(
    r"([0-9]{1,3}(?:[,\s]?[0-9]{2,3})*(?:\s?(?:लाख|करो(?:ड़|ड़)|crore|lakh))?)",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class IntentRules:
    """Phrase tables used by the matchers. Swap these to change vocabulary."""
    negative: Tuple[str, ...] = NEGATIVE_PHRASES
    defer: Tuple[str, ...] = DEFER_PHRASES
    loan_types: Tuple[Tuple[LoanType, Tuple[str, ...]], ...] = LOAN_TYPE_RULES


DEFAULT_RULES = IntentRules()


@dataclass
class IntentSignals:
    """Everything the extractor knows about one utterance"""
    normalized: str = ""
    negative: bool = False
    defer: bool = False
    loan_type: LoanType = LoanType.UNKNOWN
    amount: Optional[str] = None
    matched_phrases: Tuple[str, ...] = field(default_factory=tuple)  # For debugging

    def to_dict(self) -> dict:
        return {
            "normalized": self.normalized,
            "negative": self.negative,
            "defer": self.defer,
            "loan_type": self.loan_type.value,
            "amount": self.amount,
            "matched_phrases": list(self.matched_phrases),
        }


# =============================================================================
# MATCHERS
# =============================================================================

def normalize(utterance: str) -> str:
    """Trim and lower-case. Case/whitespace never changes classification."""
    return utterance.strip().lower()


def _matches(normalized: str, phrases: Tuple[str, ...]) -> Tuple[str, ...]:
    return tuple(phrase for phrase in phrases if phrase in normalized)


def is_negative(normalized: str, rules: IntentRules = DEFAULT_RULES) -> bool:
    return any(phrase in normalized for phrase in rules.negative)


def is_defer(normalized: str, rules: IntentRules = DEFAULT_RULES) -> bool:
    """Callers must check is_negative first - negative always wins."""
    return any(phrase in normalized for phrase in rules.defer)


def detect_loan_type(normalized: str, rules: IntentRules = DEFAULT_RULES) -> LoanType:
    """
    Return the first category (in declared order) whose keywords appear.

    No scoring: "personal loan for my घर" is PERSONAL because personal
    is checked before home.
    """
    text_lower = normalized.lower()

    for loan_type, keywords in rules.loan_types:
        if any(keyword in text_lower for keyword in keywords):
            return loan_type
    return LoanType.UNKNOWN


def extract_amount(utterance: str) -> Optional[str]:
    """
    Pull the first numeric amount out of the original utterance.

    Returns the match with whitespace collapsed ("5   लाख" -> "5 लाख"),
    or None when the utterance has no digits.
    """
    match = AMOUNT_PATTERN.search(utterance)
    if not match:
        return None
    return re.sub(r"\s+", " ", match.group(1)).strip()


def classify(utterance: str, rules: IntentRules = DEFAULT_RULES) -> IntentSignals:
    """
    Run every matcher over one utterance.

    `defer` is forced False when `negative` is True so callers can read
    the two flags independently.
    """
    normalized = normalize(utterance)
    if not normalized:
        return IntentSignals()

    negative_hits = _matches(normalized, rules.negative)
    defer_hits = () if negative_hits else _matches(normalized, rules.defer)

    signals = IntentSignals(
        normalized=normalized,
        negative=bool(negative_hits),
        defer=bool(defer_hits),
        loan_type=detect_loan_type(normalized, rules),
        amount=extract_amount(utterance),
        matched_phrases=negative_hits + defer_hits,
    )

    if signals.matched_phrases:
        logger.debug(f"Intent phrases matched: {signals.matched_phrases}")

    return signals
