"""Catalog loading and validation for YAML/JSON flag catalogs."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from flagctl.core.errors import CatalogLoadError, CatalogValidationError
from flagctl.core.model import EnumValue, Flag, FlagCatalog, Parameter, normalize_key

_CATALOG_SUFFIXES = (".yml", ".yaml", ".json")
LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


UniqueKeyLoader.yaml_implicit_resolvers = {
    key: list(value) for key, value in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

for first_char, mappings in list(UniqueKeyLoader.yaml_implicit_resolvers.items()):
    UniqueKeyLoader.yaml_implicit_resolvers[first_char] = [
        (tag, regexp)
        for tag, regexp in mappings
        if tag != "tag:yaml.org,2002:bool"
    ]


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise CatalogValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class LoadedCatalog:
    catalog: FlagCatalog
    warnings: tuple[str, ...]


def load_schema_validator(name: str) -> Any:
    schema_text = resources.files("flagctl.schemas").joinpath(name).read_text(encoding="utf-8")
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def user_catalog_dir() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "flagctl/catalogs"


def _read_document(path: Path | Traversable) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogLoadError(f"Could not read catalog file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise CatalogValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise CatalogValidationError(f"Catalog file {path} must contain a mapping at root")
    return loaded


def _normalize_bool(value: Any, *, context: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise CatalogValidationError(f"{context} must be boolean true/false")


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _normalize_keys(values: list[Any] | None) -> tuple[str, ...]:
    return tuple(str(v).strip() for v in values or () if v is not None and str(v).strip())


def _build_parameter(doc: dict[str, Any], *, context: str) -> Parameter:
    return Parameter(
        name=str(doc.get("name") or ""),
        key=str(doc.get("key") or ""),
        type=str(doc.get("type") or "string"),
        value=_optional_text(doc.get("value")),
        default_value=_optional_text(doc.get("defaultValue")),
        required=_normalize_bool(doc.get("isRequired", False), context=f"{context}.isRequired"),
        enum_values=tuple(
            EnumValue(
                value=_optional_text(item.get("value")) or "",
                name=str(item.get("name", "")),
                description=str(item.get("description", "")),
            )
            for item in doc.get("enumValues") or ()
        ),
    )


def _build_flags(doc: dict[str, Any], source: Path | Traversable) -> tuple[str, list[Flag]]:
    validator = load_schema_validator("catalog.schema.json")
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise CatalogValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    flags: list[Flag] = []
    seen: set[str] = set()
    for section_name, section in doc["Sections"].items():
        order = int(section.get("Order", 0))
        for key, spec in (section.get("Flags") or {}).items():
            key = str(key).strip()
            if normalize_key(key) in seen:
                raise CatalogValidationError(f"Flag '{key}' is defined more than once in {source}")
            seen.add(normalize_key(key))
            context = f"{section_name}.{key}"
            flags.append(
                Flag(
                    key=key,
                    name=str(spec.get("name") or ""),
                    description=str(spec.get("desc") or ""),
                    section=str(section_name),
                    section_order=order,
                    enabled=_normalize_bool(spec.get("defOn", False), context=f"{context}.defOn"),
                    enabled_by=_normalize_keys(spec.get("depOn")),
                    excludes=_normalize_keys(spec.get("depRel")),
                    enables=_normalize_keys(spec.get("depOpt")),
                    requires=_normalize_keys(spec.get("depOff")),
                    parameters=tuple(
                        _build_parameter(p, context=f"{context}.parameters[{i}]")
                        for i, p in enumerate(spec.get("parameters") or ())
                    ),
                    disabled_on_platforms=_normalize_keys(spec.get("disabledOnPlatforms")),
                )
            )
    return str(doc.get("version", "")), flags


def _iter_packaged_catalog_paths() -> list[Traversable]:
    catalog_root = resources.files("flagctl.catalogs")
    return [item for item in catalog_root.iterdir() if item.name.endswith(_CATALOG_SUFFIXES)]


def _iter_user_catalog_paths() -> list[Path]:
    directory = user_catalog_dir()
    if not directory.exists() or not directory.is_dir():
        return []
    return sorted(p for p in directory.iterdir() if p.suffix in _CATALOG_SUFFIXES)


def load_catalog_file(path: Path | Traversable) -> FlagCatalog:
    version, flags = _build_flags(_read_document(path), path)
    return FlagCatalog(flags=tuple(flags), version=version)


def load_catalog(path: Path | str | None = None) -> LoadedCatalog:
    """Load an explicit catalog file, or the packaged catalog merged with user catalogs."""
    if path is not None:
        path = Path(path)
        if not path.is_file():
            raise CatalogLoadError(f"Catalog file {path} does not exist")
        return LoadedCatalog(catalog=load_catalog_file(path), warnings=())

    flags: dict[str, Flag] = {}
    warnings: list[str] = []
    version = ""

    for packaged in sorted(_iter_packaged_catalog_paths(), key=lambda p: p.name):
        doc_version, doc_flags = _build_flags(_read_document(packaged), packaged)
        version = version or doc_version
        for flag in doc_flags:
            flags[normalize_key(flag.key)] = flag

    for user_path in _iter_user_catalog_paths():
        _, doc_flags = _build_flags(_read_document(user_path), user_path)
        for flag in doc_flags:
            normalized = normalize_key(flag.key)
            if normalized in flags:
                warning = f"User catalog {user_path.name} overrides flag '{flag.key}'"
                LOGGER.warning(warning)
                warnings.append(warning)
            flags[normalized] = flag

    return LoadedCatalog(
        catalog=FlagCatalog(flags=tuple(flags.values()), version=version),
        warnings=tuple(warnings),
    )
