import pytest

from loan_agent.conversation import ConversationContext, ConversationStage
from loan_agent.intent import LoanType
from loan_agent.products import (
    CALL_FLOW_STEPS,
    LOAN_PRODUCTS,
    get_offer_line,
    get_product,
    step_for_stage,
)
from loan_agent.templates import (
    Channel,
    MESSAGE_TEMPLATES,
    TemplateError,
    fill_template,
    follow_up_variables,
    get_template,
    require_template,
    templates_by_channel,
)


# ============ PRODUCTS ============

def test_catalog_covers_every_known_loan_type():
    assert set(LOAN_PRODUCTS) == {LoanType.PERSONAL, LoanType.BUSINESS, LoanType.HOME}
    assert get_product(LoanType.HOME).apr == "8.40% से शुरुआत"


@pytest.mark.parametrize("loan_type", [None, LoanType.UNKNOWN])
def test_unknown_loan_type_resolves_to_personal(loan_type):
    assert get_product(loan_type).id == "personal"
    assert get_offer_line(loan_type) == get_offer_line(LoanType.PERSONAL)


@pytest.mark.parametrize(
    "stage,step_id",
    [
        (ConversationStage.INTRODUCTION, "greet"),
        (ConversationStage.QUALIFICATION, "qualify"),
        (ConversationStage.NEED_ANALYSIS, "qualify"),
        (ConversationStage.PITCH, "pitch"),
        (ConversationStage.DOCUMENTS, "assure"),
        (ConversationStage.CLOSING, "close"),
    ],
)
def test_step_for_stage(stage, step_id):
    assert step_for_stage(stage).id == step_id


def test_fallback_has_no_call_step():
    assert step_for_stage(ConversationStage.FALLBACK) is None
    assert len(CALL_FLOW_STEPS) == 5


# ============ TEMPLATES ============

def test_template_variables_match_body_placeholders():
    for template in MESSAGE_TEMPLATES:
        for variable in template.variables:
            assert "{" + variable + "}" in template.body


def test_templates_by_channel():
    assert {t.channel for t in templates_by_channel(Channel.SMS)} == {Channel.SMS}
    assert len(templates_by_channel(Channel.SMS)) + len(templates_by_channel(Channel.WHATSAPP)) == len(
        MESSAGE_TEMPLATES
    )


def test_fill_template_replaces_and_blanks_missing():
    template = get_template("sms_application_link")
    body = fill_template(template, {"name": "राहुल", "link": "https://x.test/a"})
    assert "प्रिय राहुल," in body
    assert "https://x.test/a" in body
    assert "{" not in body


def test_fill_template_ignores_non_string_values():
    template = get_template("sms_callback_reminder")
    body = fill_template(template, {"name": 42, "link": "L"})
    assert body.startswith("नमस्ते , ")


def test_require_template_errors():
    with pytest.raises(TemplateError):
        require_template("missing")
    with pytest.raises(TemplateError):
        require_template("whatsapp_offer_summary", channel=Channel.SMS)
    assert require_template("whatsapp_offer_summary", Channel.WHATSAPP).id == "whatsapp_offer_summary"


def test_follow_up_variables_from_context():
    context = ConversationContext(
        stage=ConversationStage.CLOSING, loan_type=LoanType.HOME, amount="20 लाख"
    )
    variables = follow_up_variables(context, link="https://x.test/home")
    assert variables == {
        "name": "ग्राहक",
        "loan": "होम लोन",
        "amount": "20 लाख",
        "rate": "8.40% से शुरुआत",
        "link": "https://x.test/home",
    }

    body = fill_template(get_template("whatsapp_offer_summary"), variables)
    assert "20 लाख होम लोन" in body
