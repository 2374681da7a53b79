from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Optional, TypeVar

from ._actions import Action, ActionTypes, action_type
from ._errors import InvalidReducerError
from ._logging import get_logger


A = TypeVar("A")
S = TypeVar("S")


__all__ = (
    "Reducer",

    "combine_reducers",
)


Reducer = Callable[[Optional[S], A], S]


logger = get_logger(__name__)


def _check_slice_reducers(reducers: Mapping[str, Reducer]) -> None:
    for key, reducer in reducers.items():
        initial_state = reducer(None, Action(type=ActionTypes.INIT))

        if initial_state is None:
            raise InvalidReducerError(
                f"Reducer {key!r} returned None during initialization; "
                "reducers must return their default state when given None"
            )

        probe = Action(type=ActionTypes.probe_unknown_action())

        if reducer(None, probe) is None:
            raise InvalidReducerError(
                f"Reducer {key!r} returned None when probed with an unknown "
                "action; unknown actions must return the current state"
            )


def combine_reducers(reducers: Mapping[str, Reducer]) -> Reducer[dict, Any]:
    """Build one reducer over a dict state out of one reducer per key.

    Each slice reducer only ever sees its own key of the state. The previous
    state object is returned as is when no slice changed identity.
    """
    final_reducers: dict[str, Reducer] = {}

    for key, reducer in reducers.items():
        if not callable(reducer):
            raise InvalidReducerError(
                f"Reducer for key {key!r} is not callable: {reducer!r}"
            )

        final_reducers[key] = reducer

    _check_slice_reducers(final_reducers)

    reported_keys: set[str] = set()

    def combination(state: Optional[Mapping[str, Any]], action: Any) -> dict:
        previous: Mapping[str, Any] = {} if state is None else state

        if not isinstance(previous, Mapping):
            raise TypeError(
                "combine_reducers expects a mapping state, "
                f"got {type(previous).__name__}"
            )

        unexpected_keys = [
            key for key in previous
            if key not in final_reducers and key not in reported_keys
        ]

        if unexpected_keys:
            reported_keys.update(unexpected_keys)

            logger.warning(
                "Dropping state keys without a reducer",
                keys=unexpected_keys
            )

        has_changed = False
        next_state: dict[str, Any] = {}

        for key, reducer in final_reducers.items():
            previous_slice = previous.get(key)
            next_slice = reducer(previous_slice, action)

            if next_slice is None:
                raise InvalidReducerError(
                    f"Reducer {key!r} returned None for action "
                    f"{action_type(action)!r}"
                )

            next_state[key] = next_slice
            has_changed = has_changed or next_slice is not previous_slice

        has_changed = has_changed or len(final_reducers) != len(previous)

        return next_state if has_changed else previous  # type: ignore[return-value]

    return combination
