"""Shared pytest fixtures and test helpers for honeycomb tests.

Profiles are built with the encoder's own writer so no binary blobs
live in the test tree.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from honeycomb.codec.constants import PROTOCOL_MAGIC_VERSION_0, AttributeType, Command, token
from honeycomb.codec.encoder import FastDataOutput, attribute_for
from honeycomb.codec.events import Attribute, TextKind
from honeycomb.codec.intern import InternTable

# Offset of no_install_unknown_sources in the user_profile fixture.
POLICY_OFFSET = 336


class AbxBuilder:
    """Fluent ABX document writer for tests.

    Attributes may be given as :class:`Attribute` or as ``(name, value)``
    pairs, in which case the narrowest wire type is chosen.
    """

    def __init__(self, *, magic: bytes = PROTOCOL_MAGIC_VERSION_0) -> None:
        self.table = InternTable()
        self._out = FastDataOutput(self.table)
        self.raw(magic)

    def __len__(self) -> int:
        return len(self._out)

    def build(self) -> bytes:
        return self._out.getvalue()

    def raw(self, data: bytes) -> AbxBuilder:
        for byte in data:
            self._out.write_byte(byte)
        return self

    def start_document(self) -> AbxBuilder:
        self._out.write_byte(token(Command.START_DOCUMENT, AttributeType.NULL))
        return self

    def end_document(self) -> AbxBuilder:
        self._out.write_byte(token(Command.END_DOCUMENT, AttributeType.NULL))
        return self

    def start(self, name: str, *attrs: Attribute | tuple[str, Any]) -> AbxBuilder:
        self._out.write_byte(token(Command.START_TAG, AttributeType.STRING_INTERNED))
        self._out.write_interned_utf(name)
        for attr in attrs:
            self._out.write_attribute(attr if isinstance(attr, Attribute) else attribute_for(*attr))
        return self

    def end(self, name: str) -> AbxBuilder:
        self._out.write_byte(token(Command.END_TAG, AttributeType.STRING_INTERNED))
        self._out.write_interned_utf(name)
        return self

    def text(self, value: str | None, kind: TextKind = TextKind.TEXT) -> AbxBuilder:
        self._out.write_text(value, kind)
        return self

    def element(
        self,
        name: str,
        *attrs: Attribute | tuple[str, Any],
        text: str | None = None,
    ) -> AbxBuilder:
        self.start(name, *attrs)
        if text is not None:
            self.text(text)
        return self.end(name)

    def pad_to(self, offset: int) -> AbxBuilder:
        """Write a comment so the next token starts at *offset*."""
        need = offset - len(self)
        assert need >= 3, f"cannot pad {len(self)} -> {offset}"
        return self.text("#" * (need - 3), TextKind.COMMENT)


def restrictions_doc(*policies: str, container: bool = True) -> bytes:
    """Minimal profile with *policies* set on the restrictions container."""
    b = AbxBuilder().start_document().start("device_policy_local_restrictions")
    if container:
        b.start("restrictions_user", ("user_id", 0))
        b.element("restrictions", *((name, True) for name in policies))
        b.end("restrictions_user")
    return b.end("device_policy_local_restrictions").end_document().build()


def build_user_profile() -> bytes:
    """A realistic user profile with three restrictions set.

    ``no_install_unknown_sources`` is the first restriction and is
    defined inline, so its token is exactly 31 bytes at [336, 367).
    """
    b = AbxBuilder().start_document()
    b.start(
        "user",
        ("id", 0),
        ("serialNumber", 0),
        Attribute("flags", AttributeType.INT_HEX, 0x413),
        ("created", 1_700_000_000_000),
        ("lastLoggedIn", 1_700_000_360_000),
        ("guestToRemove", False),
    )
    b.element("name", text="Owner")
    # A <restrictions> outside <restrictions_user> that must never match.
    b.element("restrictions", ("no_sms", True))
    b.element("ignorePrepareStorageErrors", text="false")
    b.start("device_policy_local_restrictions")
    b.start("restrictions_user", ("user_id", 0))
    # <restrictions> is already interned: token + 2-byte index.
    b.pad_to(POLICY_OFFSET - 3)
    b.element(
        "restrictions",
        ("no_install_unknown_sources", True),
        ("no_sms", True),
        ("no_debugging_features", True),
    )
    b.end("restrictions_user")
    b.end("device_policy_local_restrictions")
    b.end("user")
    return b.end_document().build()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def user_profile() -> bytes:
    return build_user_profile()


@pytest.fixture
def profile_file(tmp_path: Path, user_profile: bytes) -> Path:
    """The user_profile fixture written to ``tmp_path/0.xml``."""
    path = tmp_path / "0.xml"
    path.write_bytes(user_profile)
    return path


@pytest.fixture(autouse=True)
def _isolated_config(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Keep tests away from any honeycomb.toml or HONEYCOMB_* on the host."""
    for key in list(os.environ):
        if key.startswith("HONEYCOMB_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)
