"""
Flow definition models.

A flow is a named, repeatable interaction sequence. Two forms exist and are
modelled as a tagged variant dispatched by a single runner:

- ScriptedFlow: an ordered list of primitive action tokens
  (``click <selector>``, ``focus <selector>``, ``hover <selector>``,
  ``goto <url>``, ``wait <milliseconds>``).
- ProgrammaticFlow: caller-supplied async procedures receiving the page handle,
  with an optional unmeasured setup step.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, Optional, Tuple, Union

from ..validation.exceptions import UnknownActionError

# Signature of the callbacks used by programmatic flows.
PageProcedure = Callable[[Any], Awaitable[None]]

# Reserved identifier of the implicit initial mount flow.
MOUNT_FLOW_ID = "Mount"


class ActionType(Enum):
    """Interaction primitives a scripted flow may use."""

    CLICK = "click"
    FOCUS = "focus"
    HOVER = "hover"
    GOTO = "goto"
    WAIT = "wait"


@dataclass(frozen=True)
class FlowAction:
    """A parsed action token."""

    action: ActionType
    argument: str

    @classmethod
    def parse(cls, token: str) -> "FlowAction":
        """
        Parse an action token such as ``"click #login-btn"``.

        The first word names the action; the rest of the token, re-joined with
        single spaces, is the selector or argument.

        Raises:
            UnknownActionError: If the action word is not recognized
        """
        action_word, *rest = str(token).split(" ")
        try:
            action = ActionType(action_word)
        except ValueError:
            raise UnknownActionError(str(token)) from None
        return cls(action=action, argument=" ".join(rest))

    def __str__(self) -> str:
        return f"{self.action.value} {self.argument}".rstrip()


@dataclass(frozen=True)
class ScriptedFlow:
    id: str
    actions: Tuple[FlowAction, ...]

    @classmethod
    def from_tokens(cls, flow_id: str, tokens: Iterable[str]) -> "ScriptedFlow":
        return cls(id=flow_id, actions=tuple(FlowAction.parse(t) for t in tokens))

    @property
    def number_of_interactions(self) -> int:
        return len(self.actions)


@dataclass(frozen=True)
class ProgrammaticFlow:
    """
    A scenario driven by async callbacks.

    ``on_before`` runs with sampling disabled, ``on_profile`` is the measured
    step. The interaction count of a programmatic flow cannot be derived from
    its definition and is reported as 0.
    """

    id: str
    on_profile: PageProcedure
    on_before: Optional[PageProcedure] = None
    should_skip: bool = False

    @property
    def number_of_interactions(self) -> int:
        return 0


Flow = Union[ScriptedFlow, ProgrammaticFlow]
