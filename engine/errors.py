"""Distribution error definitions.

Callers need to tell three situations apart:
1. invalid input: the request or its data is malformed, fail fast
2. no match: the descriptor resolves to nothing, skip the request
3. invariant violation: the core produced something impossible, a defect

Codec failures get their own kind so decode requesters can report them.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(Enum):
    INVALID_INPUT = "invalid_input"
    NO_MATCH = "no_match"
    CODEC = "codec"
    INVARIANT = "invariant"


class DistributionError(Exception):
    """Base exception for the planner, tagged with an ErrorKind."""

    kind: ErrorKind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "details": dict(self.details),
        }


class InvalidInputError(DistributionError, ValueError):
    kind = ErrorKind.INVALID_INPUT


class NoMatchError(DistributionError):
    """No catalog target matched the request descriptor."""

    kind = ErrorKind.NO_MATCH


class CodecError(DistributionError, ValueError):
    kind = ErrorKind.CODEC


class InvariantViolation(DistributionError, AssertionError):
    """Raised when a core invariant is broken; never swallowed."""

    kind = ErrorKind.INVARIANT
