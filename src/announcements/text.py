from __future__ import annotations

from models.room_event import EventKind

_ORDINALS = [
    "first", "second", "third", "fourth", "fifth",
    "sixth", "seventh", "eighth", "ninth", "tenth",
]

_VERBS = {
    EventKind.ENTRY: "entered",
    EventKind.EXIT: "left",
}


def ordinal(n: int) -> str:
    """first..tenth, then "{n}th" (11th, 12th, 21th...)."""
    if 1 <= n <= len(_ORDINALS):
        return _ORDINALS[n - 1]
    return f"{n}th"


def render_announcement(kind: EventKind, count: int) -> str:
    verb = _VERBS[EventKind(kind)]
    if count == 1:
        return f"A person {verb} the room"
    return f"A {ordinal(count)} person {verb} the room"
