"""Core error hierarchy shared by the codec and the policy domain.

Every error carries a stable ``code`` and a ``detail`` dict so the
service layer can turn it into a :class:`~honeycomb.services.result.ServiceError`
without string parsing.  The core never logs; it raises one of these.
"""

from __future__ import annotations

from typing import Any


class HoneycombError(Exception):
    """Base class for every error raised by the codec and domain layers."""

    code = "HONEYCOMB_ERROR"

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = detail


# --- Decode-time errors ---


class DecodeError(HoneycombError):
    """The input is not valid ABX or uses an unsupported extension."""

    code = "DECODE_ERROR"


class MalformedHeader(DecodeError):
    code = "MALFORMED_HEADER"


class TruncatedStream(DecodeError):
    code = "TRUNCATED_STREAM"


class UnknownTag(DecodeError):
    code = "UNKNOWN_TAG"


class InvalidInternIndex(DecodeError):
    code = "INVALID_INTERN_INDEX"


class MalformedString(DecodeError):
    code = "MALFORMED_STRING"


class UnbalancedElement(DecodeError):
    code = "UNBALANCED_ELEMENT"


# --- Encode-time errors ---


class EncodeOverflow(HoneycombError):
    """A value does not fit the wire representation of its declared type."""

    code = "ENCODE_OVERFLOW"


# --- Mutation errors ---


class InvalidSpan(HoneycombError):
    """A splice range lies outside the document body or cuts through a token field."""

    code = "INVALID_SPAN"


# --- Policy / operation errors ---


class PolicyError(HoneycombError):
    """Operation and document-state mismatches."""

    code = "POLICY_ERROR"


class UnknownPolicyName(PolicyError):
    code = "UNKNOWN_POLICY"


class AmbiguousMatch(PolicyError):
    code = "AMBIGUOUS_MATCH"


class MissingContainer(PolicyError):
    code = "MISSING_CONTAINER"


class NothingToRemove(PolicyError):
    code = "NOTHING_TO_REMOVE"


class AlreadyExists(PolicyError):
    code = "ALREADY_EXISTS"


class VerifyFailed(PolicyError):
    """Re-reading an edited document did not show the expected policy state."""

    code = "VERIFY_FAILED"
