"""Core data models used across loader, resolver, session, and CLI."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from flagctl.core.errors import CatalogValidationError, FlagNotFoundError


def normalize_key(key: str | None) -> str:
    return (key or "").strip().upper()


@dataclass(frozen=True)
class EnumValue:
    value: str
    name: str = ""
    description: str = ""


@dataclass(frozen=True)
class Parameter:
    name: str = ""
    type: str = "string"
    key: str = ""
    value: str | None = None
    default_value: str | None = None
    required: bool = False
    enum_values: tuple[EnumValue, ...] = ()

    @property
    def identifier(self) -> str:
        """Explicit key when set, otherwise the display name."""
        return self.key if self.key else self.name


@dataclass(frozen=True)
class Flag:
    key: str
    name: str = ""
    description: str = ""
    section: str = ""
    section_order: int = 0
    enabled: bool = False
    enabled_by: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()
    enables: tuple[str, ...] = ()
    requires: tuple[str, ...] = ()
    parameters: tuple[Parameter, ...] = ()
    disabled_on_platforms: tuple[str, ...] = ()

    @property
    def display_name(self) -> str:
        return self.name or self.key


@dataclass(frozen=True)
class Section:
    name: str
    order: int
    flags: tuple[Flag, ...]


@dataclass(frozen=True)
class FlagCatalog:
    """Flags in catalog order, indexed by normalized key."""

    flags: tuple[Flag, ...] = ()
    version: str = ""
    _slots: dict[str, int] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        for slot, flag in enumerate(self.flags):
            normalized = normalize_key(flag.key)
            if not normalized:
                raise CatalogValidationError("Flag key must not be empty")
            if normalized in self._slots:
                raise CatalogValidationError(f"Duplicate flag key '{flag.key}' in catalog")
            self._slots[normalized] = slot

    def __iter__(self) -> Iterator[Flag]:
        return iter(self.flags)

    def __len__(self) -> int:
        return len(self.flags)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and normalize_key(key) in self._slots

    def slot(self, key: str) -> int | None:
        return self._slots.get(normalize_key(key))

    def get(self, key: str | None) -> Flag | None:
        slot = self._slots.get(normalize_key(key))
        return None if slot is None else self.flags[slot]

    def require(self, key: str) -> Flag:
        flag = self.get(key)
        if flag is None:
            raise FlagNotFoundError(f"Unknown flag '{key}'")
        return flag

    def find(self, key_or_name: str) -> Flag | None:
        flag = self.get(key_or_name)
        if flag is not None:
            return flag
        wanted = key_or_name.strip().lower()
        for candidate in self.flags:
            if candidate.name and candidate.name.strip().lower() == wanted:
                return candidate
        return None

    def resolve(self, keys: Iterable[str | None]) -> list[Flag]:
        """Catalog flags referenced by ``keys``, skipping blank and unknown keys."""
        seen: set[int] = set()
        resolved: list[Flag] = []
        for key in keys:
            slot = self._slots.get(normalize_key(key))
            if slot is None or slot in seen:
                continue
            seen.add(slot)
            resolved.append(self.flags[slot])
        return resolved

    def default_states(self) -> dict[str, bool]:
        return {flag.key: flag.enabled for flag in self.flags}

    def sections(self) -> list[Section]:
        grouped: dict[str, list[Flag]] = {}
        orders: dict[str, int] = {}
        for flag in self.flags:
            grouped.setdefault(flag.section, []).append(flag)
            orders.setdefault(flag.section, flag.section_order)
        return [
            Section(name=name, order=orders[name], flags=tuple(grouped[name]))
            for name in sorted(grouped, key=lambda n: (orders[n], n))
        ]

    def for_platform(self, platform: str | None) -> FlagCatalog:
        if not platform:
            return self
        wanted = platform.strip().lower()
        return FlagCatalog(
            flags=tuple(
                flag
                for flag in self.flags
                if wanted not in {p.strip().lower() for p in flag.disabled_on_platforms}
            ),
            version=self.version,
        )
