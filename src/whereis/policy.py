"""What the batch loop does with each kind of per-line failure."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict


class Action(str, Enum):
    ABORT = "abort"  # stop the batch with a DataError
    WARN = "warn"  # log a warning and carry on
    IGNORE = "ignore"  # carry on silently


class ErrorKind(str, Enum):
    MALFORMED_INPUT = "malformed_input"
    API_ERROR = "api_error"
    BAD_RESPONSE = "bad_response"
    LOCAL_OPEN_FAILURE = "local_open_failure"
    LOCAL_LOOKUP_FAILURE = "local_lookup_failure"


DEFAULT_ACTIONS: Dict[ErrorKind, Action] = {
    ErrorKind.MALFORMED_INPUT: Action.IGNORE,
    ErrorKind.API_ERROR: Action.WARN,
    ErrorKind.BAD_RESPONSE: Action.ABORT,
    ErrorKind.LOCAL_OPEN_FAILURE: Action.WARN,
    ErrorKind.LOCAL_LOOKUP_FAILURE: Action.WARN,
}


@dataclass(frozen=True)
class ErrorPolicy:
    """
    Maps each ErrorKind to an Action.

    A non-aborting row failure still emits the row, with the sentinel marker in
    the affected columns. A non-aborting malformed line is dropped. A
    non-aborting database open failure turns comparison off for the run.
    Transport and stream read errors are always fatal and are not listed here.
    """

    actions: Dict[ErrorKind, Action] = field(default_factory=lambda: dict(DEFAULT_ACTIONS))

    def action_for(self, kind: ErrorKind) -> Action:
        return self.actions.get(kind, DEFAULT_ACTIONS[kind])

    def with_action(self, kind: ErrorKind, action: Action) -> "ErrorPolicy":
        actions = dict(self.actions)
        actions[kind] = action
        return replace(self, actions=actions)

    @classmethod
    def strict(cls) -> "ErrorPolicy":
        actions = {kind: Action.ABORT for kind in ErrorKind}
        actions[ErrorKind.MALFORMED_INPUT] = DEFAULT_ACTIONS[ErrorKind.MALFORMED_INPUT]
        return cls(actions)
