import pytest

from loan_agent.conversation import ConversationStage
from loan_agent.intent import LoanType
from loan_agent.session import ConversationSessionManager, SessionNotFound


@pytest.fixture
def manager():
    return ConversationSessionManager()


async def test_create_session_seeds_greeting(manager):
    session, start = await manager.create_session(customer_phone="98765 43210")
    assert session.customer_phone == "+919876543210"
    assert session.context.stage == ConversationStage.INTRODUCTION
    assert session.transcript[0]["speaker"] == "agent"
    assert session.transcript[0]["text"] == start.reply


async def test_record_turn_threads_context(manager):
    session, _ = await manager.create_session()

    response = await manager.record_turn(session.session_id, "मुझे personal loan चाहिए 5 लाख का")
    assert response.stage == ConversationStage.QUALIFICATION

    stored = await manager.get_session(session.session_id)
    assert stored.context.loan_type == LoanType.PERSONAL
    assert stored.context.amount == "5 लाख"
    assert [t["speaker"] for t in stored.transcript] == ["agent", "customer", "agent"]


async def test_finished_sessions_are_not_active(manager):
    first, _ = await manager.create_session()
    second, _ = await manager.create_session()
    await manager.record_turn(first.session_id, "नहीं")

    active = await manager.get_active_sessions()
    assert [s["session_id"] for s in active] == [second.session_id]


async def test_end_session_removes_it(manager):
    session, _ = await manager.create_session()
    ended = await manager.end_session(session.session_id)
    assert ended.session_id == session.session_id

    with pytest.raises(SessionNotFound):
        await manager.get_session(session.session_id)
    with pytest.raises(SessionNotFound):
        await manager.end_session(session.session_id)


async def test_unknown_session_turn(manager):
    with pytest.raises(SessionNotFound):
        await manager.record_turn("nope", "हाँ")


async def test_deferred_session_snapshot_carries_follow_up_variables(manager):
    session, _ = await manager.create_session()
    await manager.record_turn(session.session_id, "मुझे home loan चाहिए")
    await manager.record_turn(session.session_id, "अभी busy हूँ, बाद में")

    snapshot = (await manager.get_session(session.session_id)).to_dict()
    assert snapshot["finished"] is True
    assert snapshot["call_step"]["id"] == "close"
    assert snapshot["follow_up"]["loan"] == "होम लोन"
    assert snapshot["follow_up"]["name"] == "ग्राहक"


@pytest.mark.parametrize("phone", ["(987) 654-3210", "987-654-3210", "9876543210"])
async def test_create_session_normalizes_formatted_phone(manager, phone):
    session, _ = await manager.create_session(customer_phone=phone)
    assert session.customer_phone == "+919876543210"
