"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, honeycomb.toml only contains
overrides.  No config file is needed to edit the primary user's profile.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel

from honeycomb.domain.catalogue import DEFAULT_CATALOGUE, PolicyCatalogue, PolicyRule

DEFAULT_PROFILE = Path("/data/system/users/0.xml")


# --- honeycomb.toml sections ---


class ProfileConfig(BaseModel):
    """[profile] section."""

    model_config = {"frozen": True}

    path: Path = DEFAULT_PROFILE
    backup: bool = True


class CatalogueConfig(BaseModel):
    """[catalogue] section.

    ``container`` re-targets every default rule at another element path;
    ``extra`` adds (or replaces, by name) identification rules::

        [[catalogue.extra]]
        name = "lockdown"
        kind = "keyed_element"
        container = ["global_settings"]
    """

    model_config = {"frozen": True}

    container: tuple[str, ...] | None = None
    extra: tuple[PolicyRule, ...] = ()

    def build(self) -> PolicyCatalogue:
        catalogue = DEFAULT_CATALOGUE
        if self.container:
            catalogue = catalogue.with_container(self.container)
        if self.extra:
            catalogue = catalogue.extended(self.extra)
        return catalogue

