from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SessionState(str, Enum):
    IDLE = "IDLE"
    SEARCHING = "SEARCHING"
    FOUND = "FOUND"
    NOT_FOUND = "NOT_FOUND"
    SEARCH_ERROR = "SEARCH_ERROR"
    EDITING = "EDITING"
    SUBMITTING = "SUBMITTING"


ALLOWED_TRANSITIONS: dict[SessionState, frozenset[SessionState]] = {
    SessionState.IDLE: frozenset({SessionState.SEARCHING, SessionState.EDITING, SessionState.SUBMITTING}),
    SessionState.SEARCHING: frozenset(
        {
            SessionState.SEARCHING,
            SessionState.FOUND,
            SessionState.NOT_FOUND,
            SessionState.SEARCH_ERROR,
            SessionState.SUBMITTING,
        }
    ),
    SessionState.FOUND: frozenset({SessionState.EDITING, SessionState.IDLE}),
    SessionState.NOT_FOUND: frozenset({SessionState.IDLE, SessionState.EDITING}),
    SessionState.SEARCH_ERROR: frozenset({SessionState.IDLE, SessionState.EDITING}),
    SessionState.EDITING: frozenset({SessionState.SEARCHING, SessionState.SUBMITTING, SessionState.IDLE}),
    SessionState.SUBMITTING: frozenset({SessionState.IDLE, SessionState.EDITING, SessionState.SEARCHING}),
}


class SessionStateError(RuntimeError):
    pass


def can_transition(current: SessionState, target: SessionState) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def ensure_transition(current: SessionState, target: SessionState) -> SessionState:
    if not can_transition(current, target):
        raise SessionStateError(f"transition {current.value} -> {target.value} is not allowed")
    return target


def settled_state(has_items: bool) -> SessionState:
    return SessionState.EDITING if has_items else SessionState.IDLE


@dataclass(frozen=True)
class SessionActionAvailability:
    can_search: bool
    can_edit: bool
    can_remove: bool
    can_commit: bool


def session_action_availability(state: SessionState | str, *, has_items: bool) -> SessionActionAvailability:
    value = state if isinstance(state, SessionState) else SessionState((state or "").upper())
    submitting = value is SessionState.SUBMITTING
    return SessionActionAvailability(
        can_search=not submitting,
        can_edit=has_items and not submitting,
        can_remove=has_items and not submitting,
        can_commit=has_items and value in {SessionState.IDLE, SessionState.EDITING},
    )
