"""Collections of board templates loaded from a JSON file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from flagctl.core.errors import TemplateLibraryError, TemplateNotFoundError


class TemplateLibrary:
    def __init__(self, templates: list[dict[str, Any]] | None = None) -> None:
        self._templates = list(templates or [])

    @classmethod
    def from_file(cls, path: Path | str) -> TemplateLibrary:
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise TemplateLibraryError(f"Could not read template file {path}: {exc}") from exc

        try:
            loaded = json.loads(content)
        except json.JSONDecodeError as exc:
            raise TemplateLibraryError(f"Invalid JSON in {path}: {exc}") from exc

        if not isinstance(loaded, list) or not all(isinstance(t, dict) for t in loaded):
            raise TemplateLibraryError(f"Template file {path} must contain a list of template objects")
        return cls(loaded)

    def __len__(self) -> int:
        return len(self._templates)

    def names(self) -> list[str]:
        return [str(t.get("NAME") or "") for t in self._templates]

    def get(self, name: str) -> dict[str, Any]:
        wanted = name.strip().lower()
        for template in self._templates:
            if str(template.get("NAME") or "").lower() == wanted:
                return template
        raise TemplateNotFoundError(f"Template '{name}' not found")

    def by_index(self, index: int) -> dict[str, Any]:
        if index < 0 or index >= len(self._templates):
            raise TemplateNotFoundError(
                f"Template index must be between 0 and {len(self._templates) - 1}, got {index}"
            )
        return self._templates[index]

    def search(self, keyword: str) -> list[dict[str, Any]]:
        wanted = keyword.lower()
        return [t for t in self._templates if wanted in str(t.get("NAME") or "").lower()]

    def by_manufacturer(self, manufacturer: str) -> list[dict[str, Any]]:
        wanted = manufacturer.lower()
        return [t for t in self._templates if str(t.get("NAME") or "").lower().startswith(wanted)]

    def template_json(self, name_or_index: str | int) -> str:
        if isinstance(name_or_index, int):
            template = self.by_index(name_or_index)
        else:
            template = self.get(name_or_index)
        return json.dumps(template, separators=(",", ":"))
