"""PolicyService: toggle, locate, list and render policies in a profile.

Every method reads the profile once, runs the pure codec/domain core on
the in-memory bytes, and only then touches the filesystem again.  Core
errors come back as failed ServiceResults; nothing is written unless the
whole edit succeeded.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum
from pathlib import Path
from typing import Any

from honeycomb.codec.decoder import decode, decode_all
from honeycomb.codec.events import StartElement
from honeycomb.codec.render import render_xml
from honeycomb.domain import editor
from honeycomb.domain.editor import ApplyOutcome
from honeycomb.domain.locator import locate_events, present_policies
from honeycomb.errors import HoneycombError
from honeycomb.infrastructure.filesystem import backup_profile, same_file, write_profile
from honeycomb.services._helpers import drop_none, now_compact, span_payload
from honeycomb.services.base import BaseService, ProfileReadError
from honeycomb.services.result import ServiceResult
from honeycomb.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)


class ToggleMode(StrEnum):
    """Which direction(s) a toggle may go."""

    TOGGLE = "toggle"
    SET = "set"
    CLEAR = "clear"


_EDITS: dict[ToggleMode, Callable[..., ApplyOutcome]] = {
    ToggleMode.TOGGLE: editor.apply,
    ToggleMode.SET: editor.enable,
    ToggleMode.CLEAR: editor.disable,
}


def _read_failed(op: str, exc: ProfileReadError) -> ServiceResult:
    return ServiceResult.failure(op, "READ_FAILED", str(exc), path=str(exc.path))


def _write_failed(op: str, path: Path, exc: OSError) -> ServiceResult:
    msg = f"Cannot write {path}: {exc.strerror or exc}"
    return ServiceResult.failure(op, "WRITE_FAILED", msg, path=str(path))


class PolicyService(BaseService):
    """Policy operations against one ABX profile file."""

    @traced
    def toggle(
        self,
        policy: str,
        *,
        profile_path: Path | None = None,
        output: Path | None = None,
        overwrite: bool = False,
        backup: bool | None = None,
        mode: ToggleMode = ToggleMode.TOGGLE,
        show_xml: bool = False,
    ) -> ServiceResult:
        """Flip *policy* and write the result to *output* or back in place.

        With *overwrite* the source is replaced (after a timestamped
        backup unless *backup* is False); otherwise *output* is required
        and must name a different file.
        """
        op = "toggle"
        source = self._profile_path(profile_path)

        if overwrite:
            target = source
        elif output is None:
            return ServiceResult.failure(
                op,
                "OUTPUT_REQUIRED",
                "Pass --output PATH, or --overwrite to replace the profile in place",
                path=str(source),
            )
        elif same_file(source, output):
            return ServiceResult.failure(
                op,
                "SAME_PATH",
                f"Output {output} is the input profile; use --overwrite to replace it",
                path=str(source),
            )
        else:
            target = output

        try:
            data = self._read(source)
        except ProfileReadError as exc:
            return _read_failed(op, exc)

        with trace_span("apply") as span:
            try:
                outcome = _EDITS[mode](data, policy, self.catalogue)
            except HoneycombError as exc:
                logger.debug("Edit of %s failed: %s", policy, exc.code)
                return ServiceResult.from_exception(op, exc)
            if span is not None:
                span.annotate("action", str(outcome.action))
                span.annotate("delta", outcome.delta)

        backup_path: Path | None = None
        want_backup = self._settings.profile.backup if backup is None else backup
        with trace_span("write"):
            if overwrite and want_backup:
                try:
                    backup_path = backup_profile(source, now_compact())
                except OSError as exc:
                    return _write_failed(op, source, exc)
            try:
                write_profile(target, outcome.data)
            except OSError as exc:
                return _write_failed(op, target, exc)

        logger.info("%s %s in %s (%+d bytes)", outcome.action, policy, target, outcome.delta)

        warnings: list[str] = []
        if outcome.renumbered:
            warnings.append(
                f"Re-indexed {outcome.renumbered} interned string reference(s) after the edit"
            )
        if outcome.promoted:
            warnings.append(
                f"Re-defined {outcome.promoted} interned string(s) whose definition was removed"
            )

        payload: dict[str, Any] = {
            "policy": outcome.policy,
            "action": str(outcome.action),
            "enabled": outcome.enabled,
            "span": span_payload(outcome.span),
            "delta": outcome.delta,
            "size": len(outcome.data),
            "input": str(source),
            "output": str(target),
            "backup": str(backup_path) if backup_path is not None else None,
            "appended": list(outcome.appended),
            "renumbered": outcome.renumbered,
            "promoted": outcome.promoted,
        }
        if show_xml:
            payload["xml"] = render_xml(decode(outcome.data))
        return ServiceResult(ok=True, op=op, data=drop_none(payload), warnings=warnings)

    @traced
    def locate(self, policy: str, *, profile_path: Path | None = None) -> ServiceResult:
        """Report where *policy* sits in the profile without changing it."""
        op = "locate"
        source = self._profile_path(profile_path)
        try:
            data = self._read(source)
        except ProfileReadError as exc:
            return _read_failed(op, exc)

        with trace_span("locate"):
            try:
                rule = self.catalogue.get(policy)
                located = locate_events(decode(data), rule)
            except HoneycombError as exc:
                return ServiceResult.from_exception(op, exc)

        payload: dict[str, Any] = {
            "policy": located.policy,
            "status": str(located.status),
            "found": located.found,
            "kind": str(rule.kind),
            "span": span_payload(located.span),
            "anchor": located.anchor,
            "container": span_payload(located.container),
            "path": str(source),
        }
        warnings: list[str] = []
        if located.anchor is None:
            warnings.append(f"No unique <{rule.container[-1]}> container; insertion would fail")
        return ServiceResult(ok=True, op=op, data=drop_none(payload), warnings=warnings)

    @traced
    def list_policies(
        self,
        *,
        present: bool = False,
        profile_path: Path | None = None,
    ) -> ServiceResult:
        """List catalogue policies, or only those set in the profile when *present*."""
        op = "policies"
        names = self.catalogue.names()
        payload: dict[str, Any] = {"present_only": present}

        if present:
            source = self._profile_path(profile_path)
            try:
                data = self._read(source)
            except ProfileReadError as exc:
                return _read_failed(op, exc)
            with trace_span("scan"):
                try:
                    names = present_policies(data, self.catalogue)
                except HoneycombError as exc:
                    return ServiceResult.from_exception(op, exc)
            payload["path"] = str(source)

        items = []
        for name in names:
            rule = self.catalogue.get(name)
            items.append(
                {
                    "name": rule.name,
                    "kind": str(rule.kind),
                    "container": "/".join(rule.container),
                    "description": rule.description,
                }
            )
        payload["items"] = items
        payload["count"] = len(items)
        return ServiceResult(ok=True, op=op, data=payload)

    @traced
    def show(
        self,
        *,
        profile_path: Path | None = None,
        output: Path | None = None,
    ) -> ServiceResult:
        """Render the profile as textual XML, optionally saving it to *output*."""
        op = "show"
        source = self._profile_path(profile_path)
        try:
            data = self._read(source)
        except ProfileReadError as exc:
            return _read_failed(op, exc)

        with trace_span("decode"):
            try:
                document = decode_all(data)
            except HoneycombError as exc:
                return ServiceResult.from_exception(op, exc)
        xml = render_xml(document.events)

        if output is not None:
            with trace_span("write"):
                try:
                    write_profile(output, xml.encode("utf-8"))
                except OSError as exc:
                    return _write_failed(op, output, exc)

        payload: dict[str, Any] = {
            "path": str(source),
            "output": str(output) if output is not None else None,
            "size": len(data),
            "elements": sum(isinstance(e, StartElement) for e in document.events),
            "interned": len(document.table),
            "xml": xml,
        }
        return ServiceResult(ok=True, op=op, data=drop_none(payload))
