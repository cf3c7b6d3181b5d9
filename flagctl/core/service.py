"""Service layer used by CLI and future UI frontends."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from flagctl.core.catalog_loader import load_catalog
from flagctl.core.codec import decode_options
from flagctl.core.config_store import ConfigurationStore, SavedConfiguration
from flagctl.core.errors import ConfigurationStoreError
from flagctl.core.model import Flag, Section
from flagctl.core.session import FlagSession
from flagctl.templates.device import DeviceConfiguration
from flagctl.templates.mapper import (
    configuration_summary,
    create_enabled_build_flags,
    select_build_flags,
)
from flagctl.templates.parser import parse_template

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TemplateSelection:
    config: DeviceConfiguration
    warnings: tuple[str, ...]
    flag_keys: tuple[str, ...]
    flags: tuple[Flag, ...]
    summary: str


class BuildService:
    def __init__(
        self,
        *,
        catalog_path: Path | str | None = None,
        store: ConfigurationStore | None = None,
        platform: str | None = None,
    ) -> None:
        loaded = load_catalog(catalog_path)
        self.catalog = loaded.catalog.for_platform(platform)
        self.load_warnings = loaded.warnings
        self.store = store or ConfigurationStore()
        self.platform = platform or ""

    def list_flags(self) -> list[Section]:
        return self.catalog.sections()

    def new_session(self) -> FlagSession:
        return FlagSession(self.catalog)

    def resolve(
        self,
        enable: Sequence[str] = (),
        disable: Sequence[str] = (),
        base: Iterable[str] | None = None,
    ) -> FlagSession:
        """Start from ``base`` (or catalog defaults), then enable and disable in order."""
        session = self.new_session()
        if base is not None:
            unknown = session.apply_keys(base)
            if unknown:
                LOGGER.warning("Ignoring unknown flags: %s", ", ".join(unknown))
        for key in enable:
            session.set_enabled(key, True)
        for key in disable:
            session.set_enabled(key, False)
        return session

    def translate_template(self, text: str | None) -> TemplateSelection:
        parsed = parse_template(text)
        flags = create_enabled_build_flags(parsed.config, self.catalog)
        return TemplateSelection(
            config=parsed.config,
            warnings=parsed.warnings,
            flag_keys=tuple(sorted(select_build_flags(parsed.config))),
            flags=tuple(flags),
            summary=configuration_summary(parsed.config),
        )

    def session_from_template(self, text: str | None) -> tuple[FlagSession, TemplateSelection]:
        selection = self.translate_template(text)
        session = self.new_session()
        session.apply_keys(flag.key for flag in selection.flags)
        return session, selection

    def save(
        self,
        session: FlagSession,
        name: str | None = None,
        *,
        port: str = "",
    ) -> SavedConfiguration:
        return self.store.save(
            session.enabled_flags(),
            name=name,
            platform=self.platform,
            port=port,
            parameter_values=session.parameter_values(),
        )

    def load(self, encoded_or_hash: str) -> tuple[FlagSession, tuple[str, ...]]:
        """Session for an encoded string or a saved configuration; also returns unknown keys."""
        saved: SavedConfiguration | None = None
        keys = decode_options(encoded_or_hash.strip())
        if keys is None:
            saved = self.store.find(encoded_or_hash)
            keys = saved.flags
        if not keys:
            raise ConfigurationStoreError(f"'{encoded_or_hash}' does not contain any flags")

        session = self.new_session()
        unknown = session.apply_keys(keys)
        if saved is not None:
            for flag_key, values in saved.parameters.items():
                if flag_key not in session.catalog:
                    continue
                for identifier, value in values.items():
                    session.set_parameter(flag_key, identifier, value)
        return session, tuple(unknown)

    def list_configurations(self) -> list[SavedConfiguration]:
        return self.store.list()

    def delete_configuration(self, name: str) -> bool:
        return self.store.delete(name)
