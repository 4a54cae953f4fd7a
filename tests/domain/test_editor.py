"""Tests for apply / enable / disable."""

from __future__ import annotations

import pytest

from honeycomb.codec.events import ByteRange
from honeycomb.domain.catalogue import DEFAULT_CATALOGUE, PolicyRule, RuleKind
from honeycomb.domain import editor
from honeycomb.domain.editor import Action, apply, disable, enable
from honeycomb.domain.mutator import Splice
from honeycomb.domain.locator import MatchStatus, locate
from honeycomb.errors import (
    AlreadyExists,
    AmbiguousMatch,
    EncodeOverflow,
    MalformedHeader,
    MissingContainer,
    NothingToRemove,
    UnknownPolicyName,
    VerifyFailed,
)
from tests.conftest import AbxBuilder, restrictions_doc


class TestApplyScenarios:
    def test_removes_present_policy(self, user_profile: bytes) -> None:
        outcome = apply(user_profile, "no_install_unknown_sources")
        assert outcome.action is Action.REMOVED
        assert not outcome.enabled
        assert outcome.span == ByteRange(336, 367)
        assert outcome.delta == -31
        assert outcome.data == user_profile[:336] + user_profile[367:]
        assert locate(outcome.data, "no_install_unknown_sources").status is MatchStatus.NOT_FOUND

    def test_inserts_absent_policy(self, user_profile: bytes) -> None:
        outcome = apply(user_profile, "no_factory_reset")
        assert outcome.action is Action.INSERTED
        assert outcome.enabled
        assert outcome.appended == ("no_factory_reset",)
        assert outcome.delta == 21
        located = locate(outcome.data, "no_factory_reset")
        assert located.found
        assert located.span == outcome.span

    def test_missing_header_produces_nothing(self, user_profile: bytes) -> None:
        with pytest.raises(MalformedHeader):
            apply(user_profile[4:], "no_install_unknown_sources")

    def test_toggle_twice_restores_input(self, user_profile: bytes) -> None:
        once = apply(user_profile, "no_factory_reset")
        twice = apply(once.data, "no_factory_reset")
        assert twice.action is Action.REMOVED
        assert twice.data == user_profile

    def test_other_policies_untouched(self, user_profile: bytes) -> None:
        outcome = apply(user_profile, "no_sms")
        assert locate(outcome.data, "no_install_unknown_sources").span == ByteRange(336, 367)
        assert locate(outcome.data, "no_debugging_features").found

    def test_reinsert_after_removal_defines_name_again(self, user_profile: bytes) -> None:
        removed = apply(user_profile, "no_install_unknown_sources")
        restored = apply(removed.data, "no_install_unknown_sources")
        assert restored.action is Action.INSERTED
        assert restored.appended == ("no_install_unknown_sources",)
        assert locate(restored.data, "no_install_unknown_sources").found


class TestApplyErrors:
    def test_unknown_policy(self, user_profile: bytes) -> None:
        with pytest.raises(UnknownPolicyName):
            apply(user_profile, "no_teleportation")

    def test_ambiguous(self) -> None:
        with pytest.raises(AmbiguousMatch):
            apply(restrictions_doc("no_sms", "no_sms"), "no_sms")

    def test_missing_container(self) -> None:
        with pytest.raises(MissingContainer):
            apply(restrictions_doc(container=False), "no_sms")


class TestEnableDisable:
    def test_enable_absent(self) -> None:
        outcome = enable(restrictions_doc(), "no_camera")
        assert outcome.action is Action.INSERTED

    def test_enable_present(self, user_profile: bytes) -> None:
        with pytest.raises(AlreadyExists) as exc_info:
            enable(user_profile, "no_sms")
        assert exc_info.value.detail["span"] == (367, 370)

    def test_disable_present(self, user_profile: bytes) -> None:
        assert disable(user_profile, "no_sms").action is Action.REMOVED

    def test_disable_absent(self, user_profile: bytes) -> None:
        with pytest.raises(NothingToRemove):
            disable(user_profile, "no_factory_reset")


class TestCustomRules:
    def test_keyed_element_insert_and_remove(self) -> None:
        rule = PolicyRule(name="lockdown", kind=RuleKind.KEYED_ELEMENT, container=("global",))
        catalogue = DEFAULT_CATALOGUE.extended([rule])
        data = (
            AbxBuilder()
            .start_document()
            .start("global")
            .element("setting", ("name", "other"), ("value", True))
            .end("global")
            .end_document()
            .build()
        )

        inserted = apply(data, "lockdown", catalogue)
        assert inserted.action is Action.INSERTED
        # The key is a plain string; every interned name already exists.
        assert inserted.appended == ()

        removed = apply(inserted.data, "lockdown", catalogue)
        assert removed.action is Action.REMOVED
        assert removed.data == data

    def test_element_rule(self) -> None:
        rule = PolicyRule(name="kiosk", kind=RuleKind.ELEMENT, container=("global",))
        catalogue = DEFAULT_CATALOGUE.extended([rule])
        data = AbxBuilder().start_document().element("global").end_document().build()
        inserted = apply(data, "kiosk", catalogue)
        assert inserted.appended == ("kiosk", "value")
        assert apply(inserted.data, "kiosk", catalogue).data == data


def _full_table_doc() -> bytes:
    """Container document whose intern table holds exactly 65535 strings."""
    b = AbxBuilder().start_document().start("device_policy_local_restrictions")
    # 2 + 65530 + 3 names in total.
    b.start("filler", *((f"a{i}", True) for i in range(65530))).end("filler")
    b.start("restrictions_user", ("user_id", 0))
    b.element("restrictions")
    b.end("restrictions_user")
    b.end("device_policy_local_restrictions")
    assert len(b.table) == 65535
    return b.end_document().build()


class TestInternOverflow:
    def test_insert_into_full_table(self) -> None:
        with pytest.raises(EncodeOverflow) as exc_info:
            apply(_full_table_doc(), "no_factory_reset")
        assert exc_info.value.code == "ENCODE_OVERFLOW"
        assert exc_info.value.detail["value"] == "no_factory_reset"

    def test_insert_of_interned_name_still_works(self) -> None:
        rule = PolicyRule(name="a7")
        catalogue = DEFAULT_CATALOGUE.extended([rule])
        outcome = apply(_full_table_doc(), "a7", catalogue)
        assert outcome.action is Action.INSERTED
        assert outcome.appended == ()
        assert outcome.delta == 3


class TestVerification:
    def test_failed_edit_raises_coded_error(
        self, user_profile: bytes, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def no_op(buffer: bytes, span: ByteRange | None) -> Splice:
            assert span is not None
            return Splice(data=buffer, span=span, fragment=b"")

        monkeypatch.setattr(editor, "remove", no_op)
        with pytest.raises(VerifyFailed) as exc_info:
            apply(user_profile, "no_sms")
        assert exc_info.value.code == "VERIFY_FAILED"
        assert exc_info.value.detail == {"policy": "no_sms", "status": "found"}

    def test_skipped_without_verify(
        self, user_profile: bytes, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def no_op(buffer: bytes, span: ByteRange | None) -> Splice:
            assert span is not None
            return Splice(data=buffer, span=span, fragment=b"")

        monkeypatch.setattr(editor, "remove", no_op)
        assert apply(user_profile, "no_sms", verify=False).data == user_profile
