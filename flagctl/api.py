"""Stable public API for building tooling on top of flagctl.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

from flagctl.core.codec import calculate_hash, decode_options, encode_options
from flagctl.core.config_store import ConfigurationStore, SavedConfiguration
from flagctl.core.errors import (
    CatalogLoadError,
    CatalogValidationError,
    ConfigurationStoreError,
    DependencyBlockedError,
    FlagctlError,
    FlagNotFoundError,
    NullInputError,
    TemplateLibraryError,
    TemplateNotFoundError,
)
from flagctl.core.model import EnumValue, Flag, FlagCatalog, Parameter, Section
from flagctl.core.service import BuildService, TemplateSelection
from flagctl.core.session import FlagSession
from flagctl.templates.device import DeviceConfiguration
from flagctl.templates.library import TemplateLibrary

__all__ = [
    "FlagctlError",
    "CatalogLoadError",
    "CatalogValidationError",
    "ConfigurationStoreError",
    "DependencyBlockedError",
    "FlagNotFoundError",
    "NullInputError",
    "TemplateLibraryError",
    "TemplateNotFoundError",
    "DeviceConfiguration",
    "EnumValue",
    "Flag",
    "FlagCatalog",
    "FlagSession",
    "Parameter",
    "SavedConfiguration",
    "Section",
    "TemplateLibrary",
    "TemplateSelection",
    "calculate_hash",
    "decode_options",
    "encode_options",
    "Client",
]


class Client:
    """Public client for interacting with flagctl core capabilities.

    A `Client` instance wraps catalog loading, flag resolution, template
    translation and the saved-configuration store behind a stable API intended
    for third-party tools (GUI/TUI/services/scripts).
    """

    def __init__(
        self,
        *,
        catalog_path: Path | str | None = None,
        store_dir: Path | str | None = None,
        platform: str | None = None,
    ) -> None:
        self._service = BuildService(
            catalog_path=catalog_path,
            store=ConfigurationStore(store_dir),
            platform=platform,
        )

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._service.load_warnings

    @property
    def catalog(self) -> FlagCatalog:
        return self._service.catalog

    def list_flags(self) -> list[Section]:
        return self._service.list_flags()

    def new_session(self) -> FlagSession:
        return self._service.new_session()

    def resolve(
        self,
        *,
        enable: Sequence[str] = (),
        disable: Sequence[str] = (),
        base: Iterable[str] | None = None,
    ) -> FlagSession:
        return self._service.resolve(enable, disable, base=base)

    def translate_template(self, text: str) -> TemplateSelection:
        return self._service.translate_template(text)

    def session_from_template(self, text: str) -> tuple[FlagSession, TemplateSelection]:
        return self._service.session_from_template(text)

    def save(
        self,
        session: FlagSession,
        *,
        name: str | None = None,
        port: str = "",
    ) -> SavedConfiguration:
        return self._service.save(session, name, port=port)

    def load(self, encoded_or_hash: str) -> tuple[FlagSession, tuple[str, ...]]:
        return self._service.load(encoded_or_hash)

    def list_configurations(self) -> list[SavedConfiguration]:
        return self._service.list_configurations()

    def delete_configuration(self, name: str) -> bool:
        return self._service.delete_configuration(name)
