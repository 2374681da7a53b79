from typing import Any, Literal, Optional

import pytest

from ustore import Action, create_store


class Increment(Action):
    type: Literal["INC"] = "INC"


class Decrement(Action):
    type: Literal["DEC"] = "DEC"


class Add(Action):
    type: Literal["ADD"] = "ADD"
    payload: int


def counter(state: Optional[int], action: Any) -> int:
    if state is None:
        state = 0

    kind = action["type"] if isinstance(action, dict) else action.type

    if kind == "INC":
        return state + 1

    if kind == "DEC":
        return state - 1

    if kind == "ADD":
        return state + action.payload

    return state


@pytest.fixture
def counter_reducer():
    return counter


@pytest.fixture
def store():
    return create_store(counter, 0)
