"""Saved build configurations stored as JSON files."""

from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from flagctl.core.codec import calculate_hash, decode_options, encode_options
from flagctl.core.errors import ConfigurationStoreError
from flagctl.core.model import Flag

LOGGER = logging.getLogger(__name__)

_UNSAFE_NAME_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def default_store_dir() -> Path:
    xdg_data = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return xdg_data / "flagctl/configurations"


def sanitize_name(name: str) -> str:
    return _UNSAFE_NAME_RE.sub("_", name).strip().strip(".")


@dataclass(frozen=True)
class SavedConfiguration:
    hash: str
    encoded: str
    name: str
    saved_at: str
    platform: str = ""
    port: str = ""
    parameters: dict[str, dict[str, str]] = field(default_factory=dict)

    @property
    def flags(self) -> list[str]:
        return decode_options(self.encoded) or []

    def to_dict(self) -> dict[str, Any]:
        return {
            "hash": self.hash,
            "encoded": self.encoded,
            "name": self.name,
            "savedAt": self.saved_at,
            "platform": self.platform,
            "port": self.port,
            "parameters": self.parameters,
        }

    @classmethod
    def from_dict(cls, doc: Mapping[str, Any]) -> SavedConfiguration:
        encoded = doc.get("encoded")
        if not isinstance(encoded, str) or not encoded:
            raise ConfigurationStoreError("Saved configuration has no encoded flag set")
        keys = decode_options(encoded)
        if keys is None:
            raise ConfigurationStoreError("Saved configuration has an unreadable encoded flag set")
        parameters = doc.get("parameters") or {}
        if not isinstance(parameters, dict) or not all(
            values is None or isinstance(values, dict) for values in parameters.values()
        ):
            raise ConfigurationStoreError("Saved configuration parameters must be a mapping of mappings")
        return cls(
            hash=str(doc.get("hash") or calculate_hash(keys)),
            encoded=encoded,
            name=str(doc.get("name") or ""),
            saved_at=str(doc.get("savedAt") or ""),
            platform=str(doc.get("platform") or ""),
            port=str(doc.get("port") or ""),
            parameters={
                str(flag): {str(k): str(v) for k, v in (values or {}).items()}
                for flag, values in parameters.items()
            },
        )


class ConfigurationStore:
    def __init__(self, directory: Path | str | None = None) -> None:
        self.directory = Path(directory) if directory is not None else default_store_dir()

    def save(
        self,
        flags: Iterable[Flag] | Iterable[str],
        name: str | None = None,
        platform: str = "",
        port: str = "",
        parameter_values: Mapping[str, Mapping[str, str]] | None = None,
    ) -> SavedConfiguration:
        keys = [item.key if isinstance(item, Flag) else item for item in flags]
        encoded = encode_options(keys)
        if not encoded:
            raise ConfigurationStoreError("Cannot save a configuration with no enabled flags")

        now = datetime.now()
        file_stem = sanitize_name(name) if name else ""
        if not file_stem:
            file_stem = f"Config_{now:%Y%m%d_%H%M%S}"

        saved = SavedConfiguration(
            hash=calculate_hash(keys),
            encoded=encoded,
            name=name or file_stem,
            saved_at=now.isoformat(timespec="seconds"),
            platform=platform,
            port=port,
            parameters={
                flag: dict(values) for flag, values in (parameter_values or {}).items()
            },
        )

        path = self.directory / f"{file_stem}.json"
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(saved.to_dict(), indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise ConfigurationStoreError(f"Could not write configuration {path}: {exc}") from exc
        LOGGER.debug("Saved configuration %s to %s", saved.name, path)
        return saved

    def list(self) -> list[SavedConfiguration]:
        """Readable saved configurations, newest first."""
        if not self.directory.is_dir():
            return []

        saved: list[SavedConfiguration] = []
        for path in sorted(self.directory.glob("*.json")):
            try:
                doc = json.loads(path.read_text(encoding="utf-8"))
                if not isinstance(doc, dict):
                    raise ConfigurationStoreError("expected a JSON object")
                saved.append(SavedConfiguration.from_dict(doc))
            except (
                OSError,
                UnicodeDecodeError,
                json.JSONDecodeError,
                RecursionError,
                ConfigurationStoreError,
            ) as exc:
                LOGGER.warning("Skipping configuration file %s: %s", path.name, exc)
        return sorted(saved, key=lambda s: s.saved_at, reverse=True)

    def find(self, encoded_or_hash: str) -> SavedConfiguration:
        wanted = encoded_or_hash.strip()
        for saved in self.list():
            if saved.encoded == wanted or saved.hash == wanted.lower() or saved.name == wanted:
                return saved
        raise ConfigurationStoreError(f"No saved configuration matches '{encoded_or_hash}'")

    def delete(self, name: str) -> bool:
        file_name = name if name.endswith(".json") else f"{name}.json"
        path = self.directory / sanitize_name(file_name)
        if not path.is_file():
            return False
        try:
            path.unlink()
        except OSError as exc:
            raise ConfigurationStoreError(f"Could not delete configuration {path}: {exc}") from exc
        return True
