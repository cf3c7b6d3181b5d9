"""Mutable flag selection for one operator session."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import replace

from flagctl.core.codec import calculate_hash, encode_options
from flagctl.core.model import Flag, FlagCatalog, normalize_key
from flagctl.core.resolver import FlagStates, disable_flag, enable_flag


class FlagSession:
    """Holds flag states and parameter values, running the resolver on every toggle.

    Not thread-safe; one writer at a time.
    """

    def __init__(self, catalog: FlagCatalog, states: Mapping[str, bool] | None = None) -> None:
        self.catalog = catalog
        self._states: FlagStates = catalog.default_states()
        if states:
            for key, enabled in states.items():
                flag = catalog.get(key)
                if flag is not None:
                    self._states[flag.key] = bool(enabled)
        self._parameters: dict[str, dict[str, str]] = {
            flag.key: {
                p.identifier: p.value if p.value is not None else (p.default_value or "")
                for p in flag.parameters
                if p.identifier
            }
            for flag in catalog
        }

    @property
    def states(self) -> FlagStates:
        return dict(self._states)

    def is_enabled(self, key: str) -> bool:
        flag = self.catalog.require(key)
        return self._states[flag.key]

    def set_enabled(self, key: str, enabled: bool) -> FlagStates:
        """Toggle ``key`` and apply its cascades; raises and leaves state as is when blocked."""
        flag = self.catalog.require(key)
        tentative = dict(self._states)
        tentative[flag.key] = enabled
        if enabled:
            updated = enable_flag(flag, self.catalog, tentative)
        else:
            updated = disable_flag(flag, self.catalog, tentative)
        self._states = updated
        return self.states

    def apply_keys(self, keys: Iterable[str]) -> list[str]:
        """Enable exactly ``keys`` without cascades; returns keys missing from the catalog."""
        wanted = {normalize_key(k) for k in keys if k and k.strip()}
        unknown = sorted(k for k in wanted if k not in self.catalog)
        self._states = {flag.key: normalize_key(flag.key) in wanted for flag in self.catalog}
        return unknown

    def set_parameter(self, key: str, identifier: str, value: str) -> None:
        flag = self.catalog.require(key)
        self._parameters.setdefault(flag.key, {})[identifier] = value

    def parameter_values(self) -> dict[str, dict[str, str]]:
        """``{flag key: {parameter identifier: value}}`` for enabled flags."""
        return {key: dict(self._parameters.get(key, {})) for key in self.enabled_keys()}

    def enabled_keys(self) -> list[str]:
        return [flag.key for flag in self.catalog if self._states[flag.key]]

    def enabled_flags(self) -> list[Flag]:
        enabled: list[Flag] = []
        for flag in self.catalog:
            if not self._states[flag.key]:
                continue
            values = self._parameters.get(flag.key, {})
            parameters = tuple(
                replace(p, value=values[p.identifier]) if p.identifier in values else p
                for p in flag.parameters
            )
            enabled.append(replace(flag, enabled=True, parameters=parameters))
        return enabled

    def hash(self) -> str:
        return calculate_hash(self.enabled_keys())

    def encoded(self) -> str:
        return encode_options(self.enabled_keys())
