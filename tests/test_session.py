from __future__ import annotations

from pathlib import Path

import pytest

from flagctl.core.catalog_loader import load_catalog
from flagctl.core.codec import calculate_hash, decode_options
from flagctl.core.errors import DependencyBlockedError, FlagNotFoundError
from flagctl.core.model import FlagCatalog
from flagctl.core.session import FlagSession


@pytest.fixture
def catalog(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> FlagCatalog:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    return load_catalog().catalog


def test_session_starts_from_catalog_defaults(catalog: FlagCatalog) -> None:
    session = FlagSession(catalog)
    assert session.enabled_keys() == ["SUPLA_CONFIG", "SUPLA_OTA"]
    assert session.is_enabled("supla_config")


def test_blocked_enable_leaves_session_unchanged(catalog: FlagCatalog) -> None:
    session = FlagSession(catalog)
    before = session.states
    with pytest.raises(DependencyBlockedError, match="Relays"):
        session.set_enabled("SUPLA_BUTTON", True)
    assert session.states == before


def test_enable_cascades(catalog: FlagCatalog) -> None:
    session = FlagSession(catalog)
    session.set_enabled("SUPLA_THERMOSTAT", True)
    assert session.is_enabled("SUPLA_LED")
    # Relays are switched on by the thermostat through their enabled_by list.
    assert session.is_enabled("SUPLA_RELAY")

    session.set_enabled("SUPLA_NTC_10K", True)
    session.set_enabled("SUPLA_MPX_5XXX", True)
    assert not session.is_enabled("SUPLA_NTC_10K")


def test_disable_turns_off_dependents(catalog: FlagCatalog) -> None:
    session = FlagSession(catalog)
    session.set_enabled("SUPLA_CONFIG", False)
    assert not session.is_enabled("SUPLA_OTA")


def test_unknown_flag_raises(catalog: FlagCatalog) -> None:
    with pytest.raises(FlagNotFoundError):
        FlagSession(catalog).set_enabled("NOPE", True)


def test_apply_keys_sets_exact_selection(catalog: FlagCatalog) -> None:
    session = FlagSession(catalog)
    unknown = session.apply_keys(["supla_relay", "SUPLA_LED", "MYSTERY"])
    assert unknown == ["MYSTERY"]
    assert session.enabled_keys() == ["SUPLA_RELAY", "SUPLA_LED"]


def test_hash_and_encoding_follow_enabled_keys(catalog: FlagCatalog) -> None:
    session = FlagSession(catalog)
    assert session.hash() == calculate_hash(["SUPLA_OTA", "SUPLA_CONFIG"])
    assert decode_options(session.encoded()) == ["SUPLA_CONFIG", "SUPLA_OTA"]


def test_parameters_for_enabled_flags(catalog: FlagCatalog) -> None:
    session = FlagSession(catalog)
    session.set_enabled("SUPLA_THERMOSTAT", True)
    session.set_parameter("SUPLA_THERMOSTAT", "HYSTERESIS", "1.5")

    values = session.parameter_values()
    assert values["SUPLA_THERMOSTAT"] == {"HYSTERESIS": "1.5"}
    assert values["SUPLA_LED"] == {"INVERTED": "0"}
    assert "SUPLA_DHT22" not in values

    thermostat = next(f for f in session.enabled_flags() if f.key == "SUPLA_THERMOSTAT")
    assert thermostat.enabled is True
    assert thermostat.parameters[0].value == "1.5"
    assert catalog.require("SUPLA_THERMOSTAT").parameters[0].value == "0.5"
