"""BaseService: shared foundation for honeycomb services.

Every service receives the resolved :class:`HoneycombSettings` at
construction time and builds the policy catalogue from it once.
Services own profile I/O; the codec and domain layers only see bytes.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from honeycomb.infrastructure.filesystem import read_profile

if TYPE_CHECKING:
    from honeycomb.config.settings import HoneycombSettings
    from honeycomb.domain.catalogue import PolicyCatalogue

logger = logging.getLogger(__name__)


class ProfileReadError(Exception):
    """A profile could not be read; carries the offending path."""

    def __init__(self, path: Path, cause: OSError) -> None:
        super().__init__(f"Cannot read profile {path}: {cause.strerror or cause}")
        self.path = path
        self.cause = cause


class BaseService:
    """Base for service-layer classes.

    Usage::

        class PolicyService(BaseService):
            def locate(self, policy: str) -> ServiceResult:
                data = self._read(self._profile_path(None))
                ...
    """

    def __init__(self, settings: HoneycombSettings) -> None:
        self._settings = settings
        self._catalogue: PolicyCatalogue = settings.policy_catalogue()

    @property
    def catalogue(self) -> PolicyCatalogue:
        return self._catalogue

    def _profile_path(self, override: Path | None) -> Path:
        return override if override is not None else self._settings.profile.path

    def _read(self, path: Path) -> bytes:
        try:
            data = read_profile(path)
        except OSError as exc:
            raise ProfileReadError(path, exc) from exc
        logger.debug("Read %d bytes from %s", len(data), path)
        return data
