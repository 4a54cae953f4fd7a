"""Tests for the policy locator."""

from __future__ import annotations

import pytest

from honeycomb.codec.decoder import decode
from honeycomb.codec.events import ByteRange
from honeycomb.domain.catalogue import DEFAULT_CATALOGUE, PolicyRule, RuleKind
from honeycomb.domain.locator import (
    MatchStatus,
    find_anchor,
    locate,
    locate_events,
    present_policies,
)
from honeycomb.errors import AmbiguousMatch, MalformedHeader, MissingContainer, UnknownPolicyName
from tests.conftest import POLICY_OFFSET, AbxBuilder, restrictions_doc

# End of the <restrictions ...> start tag in the user_profile fixture:
# 31-byte policy, 3-byte no_sms reference, 26-byte no_debugging_features.
ANCHOR = POLICY_OFFSET + 31 + 3 + 26


class TestLocateAttribute:
    def test_found_with_exact_span(self, user_profile: bytes) -> None:
        located = locate(user_profile, "no_install_unknown_sources")
        assert located.status is MatchStatus.FOUND
        assert located.found
        assert located.span == ByteRange(336, 367)
        assert len(located.span) == 31

    def test_span_bytes_are_the_attribute_token(self, user_profile: bytes) -> None:
        located = locate(user_profile, "no_install_unknown_sources")
        assert located.span is not None
        chunk = user_profile[located.span.start : located.span.end]
        assert chunk == b"\xcf\xff\xff\x00\x1a" + b"no_install_unknown_sources"

    def test_not_found_still_reports_anchor(self, user_profile: bytes) -> None:
        located = locate(user_profile, "no_factory_reset")
        assert located.status is MatchStatus.NOT_FOUND
        assert located.span is None
        assert located.anchor == ANCHOR
        assert located.container is not None
        assert located.container.start == POLICY_OFFSET - 3

    def test_ignores_restrictions_outside_container(self, user_profile: bytes) -> None:
        # no_sms is also set on the <restrictions> directly under <user>.
        located = locate(user_profile, "no_sms")
        assert located.found
        assert located.span == ByteRange(367, 370)

    def test_unknown_policy(self, user_profile: bytes) -> None:
        with pytest.raises(UnknownPolicyName):
            locate(user_profile, "no_such_policy")

    def test_decode_errors_propagate(self) -> None:
        with pytest.raises(MalformedHeader):
            locate(b"XML\x00", "no_sms")

    def test_ambiguous_inside_one_container(self) -> None:
        data = restrictions_doc("no_sms", "no_sms")
        with pytest.raises(AmbiguousMatch) as exc_info:
            locate(data, "no_sms")
        assert len(exc_info.value.detail["spans"]) == 2

    def test_ambiguous_across_containers(self) -> None:
        b = AbxBuilder().start_document().start("root")
        for user_id in (0, 10):
            b.start("restrictions_user", ("user_id", user_id))
            b.element("restrictions", ("no_sms", True))
            b.end("restrictions_user")
        data = b.end("root").end_document().build()
        with pytest.raises(AmbiguousMatch):
            locate(data, "no_sms")

    def test_no_anchor_without_container(self) -> None:
        located = locate(restrictions_doc(container=False), "no_sms")
        assert located.status is MatchStatus.NOT_FOUND
        assert located.anchor is None


class TestLocateElements:
    def _doc(self) -> bytes:
        b = AbxBuilder().start_document().start("policies")
        b.element("lockdown", ("value", True))
        b.element("setting", ("name", "camera"), ("value", False))
        b.element("setting", ("name", "mic"), ("value", True))
        return b.end("policies").end_document().build()

    def test_element_rule(self) -> None:
        rule = PolicyRule(name="lockdown", kind=RuleKind.ELEMENT, container=("policies",))
        data = self._doc()
        located = locate_events(decode(data), rule)
        assert located.found
        assert located.span is not None
        assert data[located.span.start] == 0x32
        assert data[located.span.end - 3] == 0x33

    def test_keyed_element_rule(self) -> None:
        rule = PolicyRule(name="mic", kind=RuleKind.KEYED_ELEMENT, container=("policies",))
        data = self._doc()
        located = locate_events(decode(data), rule)
        assert located.found
        # Insertion anchor is the start of </policies>.
        assert located.anchor == len(data) - 1 - 3

    def test_keyed_element_absent(self) -> None:
        rule = PolicyRule(name="wifi", kind=RuleKind.KEYED_ELEMENT, container=("policies",))
        assert locate_events(decode(self._doc()), rule).status is MatchStatus.NOT_FOUND


class TestFindAnchor:
    def test_attribute_anchor_is_end_of_start_tag(self, user_profile: bytes) -> None:
        rule = DEFAULT_CATALOGUE.get("no_factory_reset")
        assert find_anchor(decode(user_profile), rule) == ANCHOR

    def test_missing_container(self) -> None:
        rule = DEFAULT_CATALOGUE.get("no_sms")
        with pytest.raises(MissingContainer) as exc_info:
            find_anchor(decode(restrictions_doc(container=False)), rule)
        assert exc_info.value.detail["container"] == ["restrictions_user", "restrictions"]

    def test_two_containers(self) -> None:
        b = AbxBuilder().start_document().start("root")
        for _ in range(2):
            b.start("restrictions_user").element("restrictions").end("restrictions_user")
        data = b.end("root").end_document().build()
        with pytest.raises(AmbiguousMatch):
            find_anchor(decode(data), DEFAULT_CATALOGUE.get("no_sms"))


class TestPresentPolicies:
    def test_catalogue_order(self, user_profile: bytes) -> None:
        assert present_policies(user_profile) == [
            "no_install_unknown_sources",
            "no_debugging_features",
            "no_sms",
        ]

    def test_empty_container(self) -> None:
        assert present_policies(restrictions_doc()) == []
