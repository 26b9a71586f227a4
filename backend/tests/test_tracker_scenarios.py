from datetime import date, datetime

import pytest

from forex_tracker.core.errors import NotFoundError, ValidationError
from forex_tracker.services.goals import COMPLETED, IN_PROGRESS, NOT_STARTED
from forex_tracker.services.tracker import (
    AddEntry,
    AddGoal,
    CheckProgress,
    DeleteEntry,
    EditEntry,
    EntryInput,
    RemoveGoal,
    SameDayPolicy,
    TrackerState,
    apply_mutation,
)

TODAY = date(2025, 6, 30)


def _apply(state, mutation, **kw):
    kw.setdefault("today", TODAY)
    return apply_mutation(state, mutation, **kw)


def _steps_state():
    st = _apply(TrackerState(), AddGoal("Step1", 15, 150))
    return _apply(st, AddGoal("Step2", 150, 1500))


def _scenario_a():
    st = _steps_state()
    return _apply(st, AddEntry(EntryInput(date=date(2025, 6, 1), kind="starting", balance=15)))


def _scenario_b():
    return _apply(_scenario_a(), AddEntry(EntryInput(date=date(2025, 6, 2), kind="trade", balance=150)))


def _statuses(st):
    return {g.level: g.status for g in st.goals}


def test_scenario_a_starting_balance_on_first_goal():
    st = _scenario_a()

    assert st.summary.target_status == "Step1"
    assert st.summary.progress_to_target == 0.0
    assert st.summary.latest_balance == 15.0
    assert st.entries[0].amount_to_target == pytest.approx(135.0)


def test_scenario_b_trade_reaching_target_advances_goal():
    st = _scenario_b()

    assert _statuses(st) == {"Step1": COMPLETED, "Step2": IN_PROGRESS}
    trade = st.entries[-1]
    assert trade.pnl == pytest.approx(135.0)
    assert trade.amount_to_target == pytest.approx(1350.0)
    assert st.summary.target_status == "Step2"
    assert st.summary.current_target == 1500.0
    assert st.summary.progress_to_target == 0.0


def test_scenario_c_withdrawal_above_balance_is_rejected():
    st = _scenario_b()

    with pytest.raises(ValidationError) as exc:
        _apply(st, AddEntry(EntryInput(date=date(2025, 6, 3), kind="withdrawal", amount=200)))

    assert exc.value.code == "withdrawal_exceeds_balance"
    assert len(st.entries) == 2
    assert st.summary.latest_balance == pytest.approx(150.0)


def test_scenario_d_second_trade_on_same_day_is_rejected():
    st = _scenario_b()
    first = st.entries[-1]

    with pytest.raises(ValidationError) as exc:
        _apply(st, AddEntry(EntryInput(date=date(2025, 6, 2), kind="trade", pnl=10)))

    assert exc.value.code == "duplicate_trade_day"
    assert st.entries[-1] == first


def test_scenario_e_deleting_trade_regresses_goal():
    st = _scenario_b()
    trade_id = st.entries[-1].id

    st = _apply(st, DeleteEntry(trade_id))

    assert [e.id for e in st.entries] == [1]
    assert _statuses(st) == {"Step1": IN_PROGRESS, "Step2": NOT_STARTED}
    assert st.summary.target_status == "Step1"
    assert st.entries[0].amount_to_target == pytest.approx(135.0)


def test_input_state_is_never_modified():
    st = _scenario_a()
    before = (list(st.entries), list(st.goals), st.summary)

    _apply(st, AddEntry(EntryInput(date=date(2025, 6, 2), kind="trade", balance=150)))

    assert (st.entries, st.goals, st.summary) == before


def test_trade_by_pnl_only_builds_balance_from_previous():
    st = _apply(_scenario_a(), AddEntry(EntryInput(date=date(2025, 6, 2), kind="trade", pnl=-5)))

    trade = st.entries[-1]
    assert trade.balance == pytest.approx(10.0)
    assert trade.daily_gain == pytest.approx(-5 / 15 * 100)


def test_deposit_and_withdrawal_move_balance_by_amount():
    st = _apply(_scenario_a(), AddEntry(EntryInput(date=date(2025, 6, 2), kind="deposit", amount="100")))
    st = _apply(st, AddEntry(EntryInput(date=date(2025, 6, 2), kind="withdrawal", amount=115)))

    assert [e.balance for e in st.entries] == pytest.approx([15.0, 115.0, 0.0])
    assert all(e.pnl == 0 for e in st.entries)


@pytest.mark.parametrize(
    "inp,code",
    [
        (EntryInput(date=None, kind="trade", balance=10), "date_required"),
        (EntryInput(date="2025-13-01", kind="trade", balance=10), "date_invalid"),
        (EntryInput(date=date(2025, 7, 1), kind="trade", balance=10), "future_date"),
        (EntryInput(date=date(2025, 6, 5), kind="bonus", balance=10), "entry_type_invalid"),
        (EntryInput(date=date(2025, 6, 5), kind="trade"), "trade_value_required"),
        (EntryInput(date=date(2025, 6, 5), kind="trade", balance="ten"), "not_a_number"),
        (EntryInput(date=date(2025, 6, 5), kind="starting"), "field_required"),
        (EntryInput(date=date(2025, 6, 5), kind="deposit", amount=0), "amount_not_positive"),
        (EntryInput(date=date(2025, 6, 5), kind="withdrawal", amount=-3), "amount_not_positive"),
        (EntryInput(date=date(2025, 6, 1), kind="deposit", amount=5), "starting_day_exclusive"),
        (EntryInput(date=date(2025, 6, 1), kind="starting", balance=5), "duplicate_starting_day"),
    ],
)
def test_entry_rejections(inp, code):
    st = _scenario_a()

    with pytest.raises(ValidationError) as exc:
        _apply(st, AddEntry(inp))

    assert exc.value.code == code


def test_starting_balance_cannot_join_a_busy_day():
    st = _apply(_scenario_a(), AddEntry(EntryInput(date=date(2025, 6, 3), kind="deposit", amount=5)))

    with pytest.raises(ValidationError) as exc:
        _apply(st, AddEntry(EntryInput(date=date(2025, 6, 3), kind="starting", balance=50)))
    assert exc.value.code == "starting_day_taken"


def test_same_day_policy_can_be_relaxed():
    policy = SameDayPolicy(one_trade_per_day=False, starting_exclusive=False)
    st = _apply(_scenario_b(), AddEntry(EntryInput(date=date(2025, 6, 2), kind="trade", pnl=10)), policy=policy)
    st = _apply(st, AddEntry(EntryInput(date=date(2025, 6, 1), kind="deposit", amount=5)), policy=policy)

    assert len(st.entries) == 4
    assert st.summary.latest_balance == pytest.approx(165.0)


def test_edit_recomputes_later_entries_and_skips_future_check():
    st = _scenario_b()
    trade_id = st.entries[-1].id

    st = _apply(st, EditEntry(1, EntryInput(date=date(2025, 6, 1), kind="starting", balance=20)))
    trade = next(e for e in st.entries if e.id == trade_id)
    # The trade's P&L was fixed when it was recorded.
    assert trade.balance == pytest.approx(155.0)
    assert trade.pnl == pytest.approx(135.0)

    st = _apply(st, EditEntry(trade_id, EntryInput(date=date(2025, 8, 1), kind="trade", balance=100)))
    trade = next(e for e in st.entries if e.id == trade_id)
    assert trade.date == date(2025, 8, 1)
    assert trade.pnl == pytest.approx(80.0)
    assert _statuses(st) == {"Step1": IN_PROGRESS, "Step2": NOT_STARTED}


def test_edit_checks_withdrawal_without_the_edited_entry():
    st = _apply(_scenario_b(), AddEntry(EntryInput(date=date(2025, 6, 3), kind="withdrawal", amount=100)))
    wid = st.entries[-1].id

    st = _apply(st, EditEntry(wid, EntryInput(date=date(2025, 6, 3), kind="withdrawal", amount=150)))
    assert st.entries[-1].balance == pytest.approx(0.0)

    with pytest.raises(ValidationError):
        _apply(st, EditEntry(wid, EntryInput(date=date(2025, 6, 3), kind="withdrawal", amount=151)))


def test_unknown_entry_is_not_found():
    st = _scenario_a()
    with pytest.raises(NotFoundError):
        _apply(st, DeleteEntry(99))
    with pytest.raises(NotFoundError):
        _apply(st, EditEntry(99, EntryInput(date=date(2025, 6, 1), kind="trade", balance=1)))


def test_removing_active_goal_resettles_and_recomputes_targets():
    st = _apply(_scenario_b(), AddGoal("Step3", 1500, 3000))
    assert _statuses(st) == {"Step1": COMPLETED, "Step2": IN_PROGRESS, "Step3": NOT_STARTED}

    st = _apply(st, RemoveGoal(1))

    assert [g.level for g in st.goals] == ["Step1", "Step3"]
    # 150 sits under Step3's start, so Step1 takes over again.
    assert _statuses(st) == {"Step1": IN_PROGRESS, "Step3": NOT_STARTED}
    assert st.entries[-1].amount_to_target == pytest.approx(2850.0)


def test_ids_follow_creation_order():
    st = _apply(_scenario_a(), AddEntry(EntryInput(date=date(2025, 6, 4), kind="deposit", amount=1)))
    st = _apply(st, AddEntry(EntryInput(date=date(2025, 6, 3), kind="deposit", amount=1)))

    assert [e.id for e in st.entries] == [1, 2, 3]


def test_on_settled_receives_the_final_state():
    seen = []
    st = _apply(_scenario_a(), CheckProgress(), on_settled=seen.append)

    assert seen == [st]


def test_rejected_mutation_does_not_call_on_settled():
    seen = []
    with pytest.raises(ValidationError):
        _apply(_scenario_a(), AddGoal("Step3", 1, 2), on_settled=seen.append)
    assert seen == []


def _deposit_first(amount):
    return _apply(_steps_state(), AddEntry(EntryInput(date=date(2025, 6, 1), kind="deposit", amount=amount)))


def test_deposit_first_ledger_settles_inside_the_active_range():
    # Seeded from Step1 (15) the deposit lands in Step2; re-seeded from Step2 (150) it stays there.
    st = _deposit_first(200)

    assert _statuses(st) == {"Step1": COMPLETED, "Step2": IN_PROGRESS}
    assert st.entries[0].balance == pytest.approx(350.0)
    assert st.summary.latest_balance == pytest.approx(350.0)
    assert st.summary.progress_to_target == pytest.approx(200 / 1350)
    assert _apply(st, CheckProgress()) == st


def test_deposit_first_ledger_past_the_top_target_is_stable():
    st = _deposit_first(1400)

    assert _statuses(st) == {"Step1": COMPLETED, "Step2": COMPLETED}
    assert st.summary.latest_balance == pytest.approx(1550.0)
    assert st.summary.target_status == "Step2"
    assert st.summary.progress_to_target == 1.0

    once = _apply(st, CheckProgress())
    assert once == st
    assert _apply(once, CheckProgress()) == st


def test_datetime_input_is_stored_as_a_plain_date():
    st = _apply(_scenario_a(), AddEntry(EntryInput(date=datetime(2025, 6, 2, 18, 45), kind="deposit", amount=5)))

    assert st.entries[-1].date == date(2025, 6, 2)
    assert type(st.entries[-1].date) is date

    with pytest.raises(ValidationError) as exc:
        _apply(st, AddEntry(EntryInput(date=datetime(2025, 7, 1, 9, 0), kind="deposit", amount=5)))
    assert exc.value.code == "future_date"


def test_overlong_milestone_is_rejected():
    with pytest.raises(ValidationError) as exc:
        _apply(_scenario_a(), AddEntry(EntryInput(date=date(2025, 6, 2), kind="deposit", amount=5, milestone="m" * 257)))
    assert exc.value.code == "milestone_too_long"

    st = _apply(_scenario_a(), AddEntry(EntryInput(date=date(2025, 6, 2), kind="deposit", amount=5, milestone="m" * 256)))
    assert len(st.entries[-1].milestone) == 256
