"""Gate outcome types.

Every response that reaches the gate ends in exactly one of two outcomes:

  Passed(response)          — the response was marked; marker already stripped.
  Rejected(reason, request) — the response was not marked; it never leaves.

``GateOutcome`` is the closed union of the two. Callers branch on it with
``isinstance`` and treat anything else as a programming error.

``RouteNotWhitelisted`` is NOT raised for control flow inside the gate. It only
exists to hand a ``Rejected`` outcome to the host's generic error path when no
rejection handler was registered.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from starlette.requests import Request
from starlette.responses import Response


class RejectionReason(str, Enum):
    """Why the gate refused to release a response."""

    NOT_WHITELISTED = "not_whitelisted"


@dataclass(frozen=True)
class Passed:
    """The response carried the marker and may complete normally."""

    response: Response


@dataclass(frozen=True)
class Rejected:
    """The response lacked the marker and was replaced by this rejection.

    Attributes:
        reason:  Which policy was violated.
        request: The original request, for rendering and logging.
    """

    reason: RejectionReason
    request: Request


GateOutcome = Union[Passed, Rejected]


class RouteNotWhitelisted(Exception):
    """Unhandled gate rejection propagated to the host's generic error handling."""

    def __init__(self, rejection: Rejected) -> None:
        self.rejection = rejection
        super().__init__(
            f"{rejection.request.method} {rejection.request.url.path}: "
            f"{rejection.reason.value}"
        )
