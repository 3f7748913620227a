import pytest

from loan_agent.intent import (
    DEFAULT_RULES,
    IntentRules,
    LoanType,
    classify,
    detect_loan_type,
    extract_amount,
    is_defer,
    is_negative,
    normalize,
)


def test_normalize_trims_and_lowercases():
    assert normalize("   Personal LOAN  \n") == "personal loan"
    assert normalize("   ") == ""


@pytest.mark.parametrize(
    "utterance",
    [
        "नहीं चाहिए",
        "मुझे interested नहीं है",
        "मेरा नंबर हटाओ",
        "STOP calling me",
        "please don't call",
        "call mat karo",
    ],
)
def test_negative_phrases(utterance):
    assert is_negative(normalize(utterance))


def test_negative_matching_is_substring_based():
    # "know" contains "no" - permissive on purpose
    assert is_negative(normalize("I know"))


@pytest.mark.parametrize(
    "utterance",
    ["बाद में बात करते हैं", "call me LATER", "abhi time kam hai", "मुझे सोचना होगा"],
)
def test_defer_phrases(utterance):
    assert is_defer(normalize(utterance))


def test_plain_yes_is_neither_negative_nor_defer():
    text = normalize("हाँ जी, बताइए")
    assert not is_negative(text)
    assert not is_defer(text)


@pytest.mark.parametrize(
    "utterance,expected",
    [
        ("मुझे personal loan चाहिए", LoanType.PERSONAL),
        ("मेरी सैलरी से EMI कटेगी", LoanType.PERSONAL),
        ("MSME के लिए funding", LoanType.BUSINESS),
        ("व्यापार बढ़ाना है", LoanType.BUSINESS),
        ("नया घर लेना है", LoanType.HOME),
        ("property खरीदनी है", LoanType.HOME),
        ("पैसे चाहिए", LoanType.UNKNOWN),
    ],
)
def test_detect_loan_type(utterance, expected):
    assert detect_loan_type(normalize(utterance)) == expected


def test_detect_loan_type_first_category_in_order_wins():
    # personal is declared before home
    assert detect_loan_type("personal loan for my घर") == LoanType.PERSONAL
    assert detect_loan_type("business property") == LoanType.BUSINESS


@pytest.mark.parametrize(
    "utterance,expected",
    [
        ("मुझे personal loan चाहिए 5 लाख का", "5 लाख"),
        ("लगभग 20 लाख", "20 लाख"),
        ("5\tलाख", "5 लाख"),
        ("2,50,000 rupees", "2,50,000"),
        ("1 Crore ka loan", "1 Crore"),
        ("10 lakh", "10 lakh"),
        ("3 \u0915\u0930\u094b\u095c", "3 \u0915\u0930\u094b\u095c"),
        ("3 \u0915\u0930\u094b\u0921\u093c", "3 \u0915\u0930\u094b\u0921\u093c"),
    ],
)
def test_extract_amount(utterance, expected):
    assert extract_amount(utterance) == expected


def test_extract_amount_without_digits():
    assert extract_amount("पांच लाख") is None
    assert extract_amount("") is None


def test_custom_rules_replace_vocabulary():
    rules = IntentRules(
        negative=("nahi chahiye",),
        defer=("kal",),
        loan_types=((LoanType.HOME, ("flat",)),),
    )
    assert is_negative("loan nahi chahiye", rules)
    assert not is_negative("loan nahi chahiye", DEFAULT_RULES)
    assert is_defer("kal call karo", rules)
    assert detect_loan_type("flat lena hai", rules) == LoanType.HOME
    assert detect_loan_type("personal", rules) == LoanType.UNKNOWN


def test_classify_negative_suppresses_defer():
    signals = classify("नहीं, बाद में")
    assert signals.negative is True
    assert signals.defer is False
    assert "नहीं" in signals.matched_phrases


def test_classify_collects_everything():
    signals = classify("  मुझे HOME loan चाहिए 20 लाख  ")
    assert signals.normalized == "मुझे home loan चाहिए 20 लाख"
    assert signals.loan_type == LoanType.HOME
    assert signals.amount == "20 लाख"
    assert signals.to_dict()["loan_type"] == "home"


def test_classify_empty():
    signals = classify("   ")
    assert signals.normalized == ""
    assert not signals.negative
    assert signals.amount is None
