"""Policy locator: find a policy's exact byte span and its insertion anchor.

A single forward pass over the decoded events tracks the open-element
path on a stack.  Elements whose path ends with the rule's container
path are containers; the policy is matched inside them according to
the rule kind.  Nesting has already been validated by the decoder, so
every start/end pair seen here is correctly paired.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum

from honeycomb.codec.decoder import decode
from honeycomb.codec.events import ByteRange, EndElement, Event, StartElement
from honeycomb.domain.catalogue import DEFAULT_CATALOGUE, PolicyCatalogue, PolicyRule, RuleKind
from honeycomb.errors import AmbiguousMatch, MissingContainer


class MatchStatus(StrEnum):
    FOUND = "found"
    NOT_FOUND = "not_found"


@dataclass(frozen=True, slots=True)
class Located:
    """Outcome of locating one policy in one document.

    ``anchor`` is set when exactly one container exists; it is the offset
    a new policy fragment would be spliced in front of.
    """

    policy: str
    status: MatchStatus
    span: ByteRange | None = None
    anchor: int | None = None
    container: ByteRange | None = None

    @property
    def found(self) -> bool:
        return self.status is MatchStatus.FOUND


@dataclass(slots=True)
class _Container:
    start: StartElement
    end_tag: ByteRange | None = None

    @property
    def span(self) -> ByteRange:
        assert self.start.span is not None and self.end_tag is not None
        return ByteRange(self.start.span.start, self.end_tag.end)


@dataclass(slots=True)
class _Frame:
    name: str
    container: _Container | None = None
    match_start: int | None = None


@dataclass(slots=True)
class _Scan:
    matches: list[ByteRange] = field(default_factory=list)
    containers: list[_Container] = field(default_factory=list)


def _scan(events: Iterable[Event], rule: PolicyRule) -> _Scan:
    result = _Scan()
    stack: list[_Frame] = []
    path: list[str] = []

    for event in events:
        if isinstance(event, StartElement):
            parent = stack[-1] if stack else None
            path.append(event.name)
            frame = _Frame(event.name)

            if rule.is_container(path):
                frame.container = _Container(event)
                result.containers.append(frame.container)
                if rule.kind is RuleKind.ATTRIBUTE:
                    result.matches.extend(
                        attr.span
                        for attr in event.attributes
                        if attr.span is not None and rule.matches_attribute(attr)
                    )

            if (
                parent is not None
                and parent.container is not None
                and rule.matches_element(event)
                and event.span is not None
            ):
                frame.match_start = event.span.start

            stack.append(frame)

        elif isinstance(event, EndElement):
            frame = stack.pop()
            path.pop()
            if event.span is None:
                continue
            if frame.match_start is not None:
                result.matches.append(ByteRange(frame.match_start, event.span.end))
            if frame.container is not None:
                frame.container.end_tag = event.span

    return result


def _anchor(rule: PolicyRule, container: _Container) -> int:
    if rule.kind is RuleKind.ATTRIBUTE:
        assert container.start.span is not None
        return container.start.span.end
    assert container.end_tag is not None
    return container.end_tag.start


def _container_path(rule: PolicyRule) -> str:
    return "/".join(rule.container)


def locate_events(events: Iterable[Event], rule: PolicyRule) -> Located:
    """Locate *rule* in an already decoded event stream."""
    scan = _scan(events, rule)

    if len(scan.matches) > 1:
        spans = [span.as_tuple() for span in scan.matches]
        msg = (
            f"Policy {rule.name!r} is present {len(scan.matches)} times; "
            "refusing to guess which one to edit"
        )
        raise AmbiguousMatch(msg, policy=rule.name, spans=spans)

    anchor = container = None
    if len(scan.containers) == 1 and scan.containers[0].end_tag is not None:
        only = scan.containers[0]
        anchor = _anchor(rule, only)
        container = only.span

    if scan.matches:
        return Located(rule.name, MatchStatus.FOUND, scan.matches[0], anchor, container)
    return Located(rule.name, MatchStatus.NOT_FOUND, None, anchor, container)


def locate(
    buffer: bytes,
    policy_name: str,
    catalogue: PolicyCatalogue | None = None,
) -> Located:
    """Locate *policy_name* in an ABX *buffer*.

    Raises:
        UnknownPolicyName: *policy_name* is not in the catalogue.
        AmbiguousMatch: the policy occurs more than once.
        DecodeError: *buffer* is not valid ABX.
    """
    rule = (catalogue if catalogue is not None else DEFAULT_CATALOGUE).get(policy_name)
    return locate_events(decode(buffer), rule)


def find_anchor(events: Iterable[Event], rule: PolicyRule) -> int:
    """Offset a new fragment for *rule* is spliced in front of.

    Raises:
        MissingContainer: no container element exists.
        AmbiguousMatch: more than one container element exists.
    """
    scan = _scan(events, rule)
    if not scan.containers:
        msg = f"No <{rule.container[-1]}> container at path {_container_path(rule)!r}"
        raise MissingContainer(msg, policy=rule.name, container=list(rule.container))
    if len(scan.containers) > 1:
        spans = [c.span.as_tuple() for c in scan.containers if c.end_tag is not None]
        msg = (
            f"{len(scan.containers)} containers match {_container_path(rule)!r}; "
            f"cannot choose where to insert {rule.name!r}"
        )
        raise AmbiguousMatch(msg, policy=rule.name, spans=spans)
    return _anchor(rule, scan.containers[0])


def present_policies(buffer: bytes, catalogue: PolicyCatalogue | None = None) -> list[str]:
    """Catalogue names currently set in *buffer*, in catalogue order."""
    events = list(decode(buffer))
    present: list[str] = []
    for rule in catalogue if catalogue is not None else DEFAULT_CATALOGUE:
        if _scan(events, rule).matches:
            present.append(rule.name)
    return present
