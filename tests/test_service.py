from __future__ import annotations

import json
from pathlib import Path

import pytest

from flagctl.core.codec import encode_options
from flagctl.core.config_store import ConfigurationStore
from flagctl.core.errors import ConfigurationStoreError, DependencyBlockedError
from flagctl.core.service import BuildService

SONOFF_BASIC = json.dumps({"NAME": "Sonoff Basic", "GPIO": [17, 255, 255, 255, 0, 0, 0, 0, 21, 56, 0, 0, 255]})


@pytest.fixture
def service(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> BuildService:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    return BuildService(store=ConfigurationStore(tmp_path / "store"))


def test_list_flags_groups_sections(service: BuildService) -> None:
    sections = service.list_flags()
    assert sections[0].name == "Basic"
    assert [f.key for f in sections[0].flags] == ["SUPLA_CONFIG", "SUPLA_OTA", "SUPLA_ENABLE_SSL"]


def test_platform_hides_disabled_flags(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    service = BuildService(store=ConfigurationStore(tmp_path), platform="esp32c3")
    assert "SUPLA_ADE7953" not in service.catalog
    assert "SUPLA_RELAY" in service.catalog


def test_resolve_applies_enable_then_disable(service: BuildService) -> None:
    session = service.resolve(enable=["SUPLA_RELAY", "SUPLA_BUTTON"], disable=["SUPLA_OTA"])
    assert session.enabled_keys() == ["SUPLA_CONFIG", "SUPLA_RELAY", "SUPLA_BUTTON"]


def test_resolve_from_base(service: BuildService) -> None:
    session = service.resolve(enable=["SUPLA_LED"], base=["SUPLA_RELAY"])
    assert session.enabled_keys() == ["SUPLA_RELAY", "SUPLA_LED"]


def test_resolve_propagates_blocking(service: BuildService) -> None:
    with pytest.raises(DependencyBlockedError):
        service.resolve(enable=["SUPLA_BUTTON"])


def test_translate_template(service: BuildService) -> None:
    selection = service.translate_template(SONOFF_BASIC)
    assert selection.warnings == ("Template version 1",)
    assert selection.flag_keys == ("SUPLA_BUTTON", "SUPLA_CONFIG", "SUPLA_LED", "SUPLA_RELAY")
    assert [f.key for f in selection.flags] == ["SUPLA_CONFIG", "SUPLA_RELAY", "SUPLA_BUTTON", "SUPLA_LED"]
    assert selection.summary == "Sonoff Basic: 1 relay(s), 1 button(s), 1 LED(s)"


def test_session_from_template(service: BuildService) -> None:
    session, selection = service.session_from_template(SONOFF_BASIC)
    assert session.enabled_keys() == [f.key for f in selection.flags]
    assert not session.is_enabled("SUPLA_OTA")


def test_save_and_load_round_trip(service: BuildService) -> None:
    session = service.resolve(enable=["SUPLA_THERMOSTAT"])
    session.set_parameter("SUPLA_THERMOSTAT", "HYSTERESIS", "2.0")
    saved = service.save(session, "Heating")

    assert [s.name for s in service.list_configurations()] == ["Heating"]

    loaded, unknown = service.load(saved.hash)
    assert unknown == ()
    assert loaded.enabled_keys() == session.enabled_keys()
    assert loaded.parameter_values()["SUPLA_THERMOSTAT"] == {"HYSTERESIS": "2.0"}

    assert service.delete_configuration("Heating") is True
    assert service.list_configurations() == []


def test_load_encoded_string_reports_unknown_keys(service: BuildService) -> None:
    session, unknown = service.load(encode_options(["SUPLA_LED", "RETIRED_FLAG"]))
    assert session.enabled_keys() == ["SUPLA_LED"]
    assert unknown == ("RETIRED_FLAG",)


def test_load_unknown_reference_raises(service: BuildService) -> None:
    with pytest.raises(ConfigurationStoreError):
        service.load("nothing-saved")
