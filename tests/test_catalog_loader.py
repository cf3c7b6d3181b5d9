from __future__ import annotations

from pathlib import Path

import pytest

from flagctl.core.catalog_loader import load_catalog
from flagctl.core.errors import CatalogLoadError, CatalogValidationError


def _write_catalog(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@pytest.fixture(autouse=True)
def _isolated_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))


def test_load_packaged_catalog() -> None:
    loaded = load_catalog()
    catalog = loaded.catalog
    assert loaded.warnings == ()
    assert "SUPLA_CONFIG" in catalog
    assert catalog.require("SUPLA_CONFIG").enabled is True
    assert catalog.require("SUPLA_RELAY").enabled is False
    assert catalog.require("SUPLA_OTA").requires == ("SUPLA_CONFIG",)
    assert catalog.require("SUPLA_BUTTON").enabled_by == ("SUPLA_ROLLERSHUTTER", "SUPLA_ACTION_TRIGGER")
    assert [s.name for s in catalog.sections()][:2] == ["Basic", "Control"]


def test_packaged_parameters_are_strings() -> None:
    catalog = load_catalog().catalog
    hysteresis = catalog.require("SUPLA_THERMOSTAT").parameters[0]
    assert hysteresis.identifier == "HYSTERESIS"
    assert hysteresis.value == "0.5"

    inverted = catalog.require("SUPLA_LED").parameters[0]
    assert [e.value for e in inverted.enum_values] == ["0", "1"]

    pin = catalog.require("SUPLA_DHT22").parameters[0]
    assert pin.identifier == "Pin"
    assert pin.required is True


def test_user_catalog_overrides_packaged_flag(tmp_path: Path) -> None:
    _write_catalog(
        tmp_path / "cfg" / "flagctl" / "catalogs" / "override.yaml",
        """
Sections:
  Control:
    Order: 2
    Flags:
      SUPLA_RELAY:
        name: Custom relays
        defOn: true
      CUSTOM_FEATURE:
        name: Custom
        depOff: [SUPLA_RELAY]
""",
    )

    loaded = load_catalog()
    assert loaded.catalog.require("SUPLA_RELAY").name == "Custom relays"
    assert loaded.catalog.require("SUPLA_RELAY").enabled is True
    assert "CUSTOM_FEATURE" in loaded.catalog
    assert any("overrides flag 'SUPLA_RELAY'" in warning for warning in loaded.warnings)


def test_explicit_path_replaces_packaged_catalog(tmp_path: Path) -> None:
    path = tmp_path / "only.yaml"
    _write_catalog(
        path,
        """
version: "1"
Sections:
  Main:
    Order: 1
    Flags:
      ONLY_FLAG:
        name: Only
        defOn: "false"
""",
    )

    catalog = load_catalog(path).catalog
    assert [f.key for f in catalog] == ["ONLY_FLAG"]
    assert catalog.version == "1"
    assert "SUPLA_CONFIG" not in catalog


def test_missing_explicit_path_rejected(tmp_path: Path) -> None:
    with pytest.raises(CatalogLoadError):
        load_catalog(tmp_path / "nope.yaml")


def test_duplicate_yaml_keys_rejected(tmp_path: Path) -> None:
    path = tmp_path / "dup.yaml"
    _write_catalog(
        path,
        """
Sections:
  Main:
    Flags:
      A_FLAG:
        name: First
        name: Second
""",
    )

    with pytest.raises(CatalogValidationError):
        load_catalog(path)


def test_flag_in_two_sections_rejected(tmp_path: Path) -> None:
    path = tmp_path / "twice.yaml"
    _write_catalog(
        path,
        """
Sections:
  One:
    Flags:
      A_FLAG: {name: First}
  Two:
    Flags:
      a_flag: {name: Second}
""",
    )

    with pytest.raises(CatalogValidationError, match="more than once"):
        load_catalog(path)


def test_schema_violation_rejected(tmp_path: Path) -> None:
    path = tmp_path / "bad.yaml"
    _write_catalog(
        path,
        """
Sections:
  Main:
    Flags:
      A_FLAG:
        depOn: 12
""",
    )

    with pytest.raises(CatalogValidationError, match="Schema validation failed"):
        load_catalog(path)


def test_non_boolean_default_rejected(tmp_path: Path) -> None:
    path = tmp_path / "bool.yaml"
    _write_catalog(
        path,
        """
Sections:
  Main:
    Flags:
      A_FLAG:
        defOn: yes
""",
    )

    with pytest.raises(CatalogValidationError, match="boolean"):
        load_catalog(path)


def test_json_catalog_loads(tmp_path: Path) -> None:
    path = tmp_path / "catalog.json"
    _write_catalog(
        path,
        '{"Sections": {"Main": {"Order": 1, "Flags": {"J_FLAG": {"defOn": true, "depRel": ["OTHER"]},'
        ' "OTHER": {}}}}}',
    )

    catalog = load_catalog(path).catalog
    assert catalog.require("J_FLAG").enabled is True
    assert catalog.require("J_FLAG").excludes == ("OTHER",)
