from __future__ import annotations

import pytest

from warehouse_scan_sdk.session_state import (
    SessionState,
    SessionStateError,
    can_transition,
    ensure_transition,
    session_action_availability,
    settled_state,
)


def test_lookup_cycle_transitions() -> None:
    assert can_transition(SessionState.IDLE, SessionState.SEARCHING)
    assert can_transition(SessionState.SEARCHING, SessionState.FOUND)
    assert can_transition(SessionState.FOUND, SessionState.EDITING)
    assert can_transition(SessionState.NOT_FOUND, SessionState.IDLE)
    assert can_transition(SessionState.EDITING, SessionState.SUBMITTING)
    assert can_transition(SessionState.SUBMITTING, SessionState.EDITING)


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (SessionState.IDLE, SessionState.FOUND),
        (SessionState.FOUND, SessionState.SUBMITTING),
        (SessionState.SUBMITTING, SessionState.FOUND),
        (SessionState.SEARCH_ERROR, SessionState.SEARCHING),
    ],
)
def test_invalid_transitions_raise(current: SessionState, target: SessionState) -> None:
    assert not can_transition(current, target)
    with pytest.raises(SessionStateError, match=f"{current.value} -> {target.value}"):
        ensure_transition(current, target)


def test_settled_state_follows_store_contents() -> None:
    assert settled_state(True) is SessionState.EDITING
    assert settled_state(False) is SessionState.IDLE


def test_action_availability() -> None:
    idle = session_action_availability(SessionState.IDLE, has_items=False)
    assert idle.can_search
    assert not idle.can_commit
    assert not idle.can_remove

    editing = session_action_availability("editing", has_items=True)
    assert editing.can_commit
    assert editing.can_edit

    submitting = session_action_availability(SessionState.SUBMITTING, has_items=True)
    assert not submitting.can_search
    assert not submitting.can_edit
    assert not submitting.can_commit

    searching = session_action_availability(SessionState.SEARCHING, has_items=True)
    assert searching.can_edit
    assert not searching.can_commit
