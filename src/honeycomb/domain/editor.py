"""Core entry point: flip one policy in an ABX buffer.

``apply`` locates the policy and removes it when present or inserts it
when absent.  ``enable`` and ``disable`` are the one-directional forms
for callers that already know which state they want.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from honeycomb.codec.decoder import decode
from honeycomb.codec.events import ByteRange
from honeycomb.domain.catalogue import DEFAULT_CATALOGUE, PolicyCatalogue, PolicyRule
from honeycomb.domain.locator import Located, MatchStatus, find_anchor, locate_events
from honeycomb.domain.mutator import Splice, insert, remove
from honeycomb.errors import AlreadyExists, NothingToRemove, VerifyFailed


class Action(StrEnum):
    REMOVED = "removed"
    INSERTED = "inserted"


@dataclass(frozen=True, slots=True)
class ApplyOutcome:
    """What ``apply`` did.

    ``span`` is the removed range of the input for removals and the
    range the new fragment occupies in the output for insertions.
    """

    policy: str
    action: Action
    data: bytes
    span: ByteRange
    delta: int
    appended: tuple[str, ...] = ()
    renumbered: int = 0
    promoted: int = 0

    @property
    def enabled(self) -> bool:
        return self.action is Action.INSERTED


def _outcome(rule: PolicyRule, action: Action, before: int, splice: Splice) -> ApplyOutcome:
    if action is Action.INSERTED:
        start = splice.span.start
        span = ByteRange(start, start + len(splice.fragment))
    else:
        span = splice.span
    return ApplyOutcome(
        policy=rule.name,
        action=action,
        data=splice.data,
        span=span,
        delta=len(splice.data) - before,
        appended=splice.appended,
        renumbered=splice.renumbered,
        promoted=splice.promoted,
    )


def _verify(data: bytes, rule: PolicyRule, expected: MatchStatus) -> None:
    """Re-decode the output and check the policy ended up in *expected* state."""
    after = locate_events(decode(data), rule)
    if after.status is not expected:
        msg = f"Edit of {rule.name!r} left it {after.status}, expected {expected}"
        raise VerifyFailed(msg, policy=rule.name, status=str(after.status))


def _remove(buffer: bytes, rule: PolicyRule, located: Located, verify: bool) -> ApplyOutcome:
    splice = remove(buffer, located.span)
    if verify:
        _verify(splice.data, rule, MatchStatus.NOT_FOUND)
    return _outcome(rule, Action.REMOVED, len(buffer), splice)


def _insert(buffer: bytes, rule: PolicyRule, verify: bool) -> ApplyOutcome:
    anchor = find_anchor(decode(buffer), rule)
    splice = insert(buffer, anchor, rule.build_fragment)
    if verify:
        _verify(splice.data, rule, MatchStatus.FOUND)
    return _outcome(rule, Action.INSERTED, len(buffer), splice)


def _resolve(
    buffer: bytes,
    policy_name: str,
    catalogue: PolicyCatalogue | None,
) -> tuple[bytes, PolicyRule, Located]:
    rule = (catalogue if catalogue is not None else DEFAULT_CATALOGUE).get(policy_name)
    data = bytes(buffer)
    return data, rule, locate_events(decode(data), rule)


def apply(
    buffer: bytes,
    policy_name: str,
    catalogue: PolicyCatalogue | None = None,
    *,
    verify: bool = True,
) -> ApplyOutcome:
    """Toggle *policy_name*: remove it when set, insert it when not.

    Raises:
        UnknownPolicyName, AmbiguousMatch, MissingContainer, EncodeOverflow,
        VerifyFailed, or a DecodeError subclass.  No partial result is ever returned.
    """
    data, rule, located = _resolve(buffer, policy_name, catalogue)
    if located.found:
        return _remove(data, rule, located, verify)
    return _insert(data, rule, verify)


def enable(
    buffer: bytes,
    policy_name: str,
    catalogue: PolicyCatalogue | None = None,
    *,
    verify: bool = True,
) -> ApplyOutcome:
    """Insert *policy_name*; raises AlreadyExists when it is already set."""
    data, rule, located = _resolve(buffer, policy_name, catalogue)
    if located.found:
        assert located.span is not None
        msg = f"Policy {policy_name!r} is already set"
        raise AlreadyExists(msg, policy=policy_name, span=located.span.as_tuple())
    return _insert(data, rule, verify)


def disable(
    buffer: bytes,
    policy_name: str,
    catalogue: PolicyCatalogue | None = None,
    *,
    verify: bool = True,
) -> ApplyOutcome:
    """Remove *policy_name*; raises NothingToRemove when it is not set."""
    data, rule, located = _resolve(buffer, policy_name, catalogue)
    if not located.found:
        msg = f"Policy {policy_name!r} is not set; nothing to remove"
        raise NothingToRemove(msg, policy=policy_name)
    return _remove(data, rule, located, verify)
