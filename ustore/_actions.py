from __future__ import annotations

import secrets

from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from ._errors import InvalidActionError


__all__ = (
    "Action",
    "ActionTypes",

    "is_action",
)


def _random_suffix() -> str:
    return ".".join(secrets.token_hex(3) for _ in range(2))


class Action(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    payload: Optional[Any] = None


class ActionTypes:
    """Action types reserved by the store.

    The suffixes are drawn once per process; application reducers are not
    expected to handle these and should fall through to their default.
    """

    INIT = f"@@ustore/INIT{_random_suffix()}"
    REPLACE = f"@@ustore/REPLACE{_random_suffix()}"

    @staticmethod
    def probe_unknown_action() -> str:
        return f"@@ustore/PROBE_UNKNOWN_ACTION{_random_suffix()}"


def action_type(action: Any) -> Any:
    if isinstance(action, Mapping):
        return action.get("type")

    return getattr(action, "type", None)


def is_action(action: Any) -> bool:
    if action is None:
        return False

    return action_type(action) is not None


def ensure_action(action: Any) -> Any:
    if not is_action(action):
        raise InvalidActionError(
            f"Actions must carry a 'type' discriminant, got {type(action).__name__}"
        )

    return action
