from __future__ import annotations

import pytest

from flagctl.core.errors import DependencyBlockedError, NullInputError
from flagctl.core.model import Flag, FlagCatalog
from flagctl.core.resolver import blocking_dependencies, disable_flag, enable_flag


@pytest.fixture
def catalog() -> FlagCatalog:
    return FlagCatalog(
        flags=(
            Flag("BASE", name="Base"),
            Flag("FEATURE", requires=("BASE",)),
            Flag("EXTRA", enables=("HELPER",)),
            Flag("HELPER", enables=("DEEP",)),
            Flag("DEEP"),
            Flag("FOLLOWER", enabled_by=("EXTRA",), requires=("BASE",)),
            Flag("LEFT", excludes=("RIGHT",)),
            Flag("RIGHT", excludes=("LEFT",)),
        )
    )


def test_enable_blocked_by_disabled_dependency(catalog: FlagCatalog) -> None:
    states = {"FEATURE": True}
    with pytest.raises(DependencyBlockedError) as excinfo:
        enable_flag(catalog.require("FEATURE"), catalog, states)

    assert excinfo.value.flag_key == "FEATURE"
    assert excinfo.value.missing == ("Base",)
    assert str(excinfo.value) == (
        "Cannot enable 'FEATURE'. The following dependencies must be enabled first: Base"
    )
    assert states == {"FEATURE": True}


def test_blocking_dependencies_lists_disabled_requirements(catalog: FlagCatalog) -> None:
    feature = catalog.require("FEATURE")
    assert [f.key for f in blocking_dependencies(feature, catalog)] == ["BASE"]
    assert blocking_dependencies(feature, catalog, {"BASE": True}) == []


def test_enable_with_dependency_met(catalog: FlagCatalog) -> None:
    states = enable_flag(catalog.require("FEATURE"), catalog, {"BASE": True, "FEATURE": True})
    assert states["BASE"] is True
    assert states["FEATURE"] is True


def test_enable_turns_on_enables_and_followers(catalog: FlagCatalog) -> None:
    states = enable_flag(catalog.require("EXTRA"), catalog, {"EXTRA": True})
    assert states["HELPER"] is True
    # Followers are switched on even though their own requirement is off.
    assert states["FOLLOWER"] is True
    assert states["BASE"] is False


def test_cascade_is_one_level_deep(catalog: FlagCatalog) -> None:
    states = enable_flag(catalog.require("EXTRA"), catalog, {"EXTRA": True})
    assert states["HELPER"] is True
    assert states["DEEP"] is False


def test_enable_turns_off_excluded(catalog: FlagCatalog) -> None:
    states = enable_flag(catalog.require("LEFT"), catalog, {"LEFT": True, "RIGHT": True})
    assert states["LEFT"] is True
    assert states["RIGHT"] is False


def test_disable_also_turns_off_excluded(catalog: FlagCatalog) -> None:
    states = disable_flag(catalog.require("LEFT"), catalog, {"LEFT": False, "RIGHT": True})
    assert states["RIGHT"] is False


def test_disable_turns_off_dependents(catalog: FlagCatalog) -> None:
    states = disable_flag(
        catalog.require("BASE"),
        catalog,
        {"BASE": False, "FEATURE": True, "FOLLOWER": True, "HELPER": True},
    )
    assert states["FEATURE"] is False
    assert states["FOLLOWER"] is False
    assert states["HELPER"] is True


def test_input_states_are_not_mutated(catalog: FlagCatalog) -> None:
    states = {"LEFT": True, "RIGHT": True}
    enable_flag(catalog.require("LEFT"), catalog, states)
    assert states == {"LEFT": True, "RIGHT": True}


def test_result_covers_every_catalog_flag(catalog: FlagCatalog) -> None:
    states = enable_flag(catalog.require("DEEP"), catalog, {"DEEP": True})
    assert set(states) == {flag.key for flag in catalog}


def test_unknown_references_are_ignored() -> None:
    catalog = FlagCatalog(flags=(Flag("A", requires=("MISSING",), enables=("GHOST",)),))
    assert enable_flag(catalog.require("A"), catalog, {"A": True}) == {"A": True}


def test_enable_without_inputs_raises(catalog: FlagCatalog) -> None:
    with pytest.raises(NullInputError):
        enable_flag(None, catalog)
    with pytest.raises(NullInputError):
        enable_flag(catalog.require("BASE"), None)


def test_disable_without_inputs_is_noop(catalog: FlagCatalog) -> None:
    states = {"BASE": True}
    result = disable_flag(None, catalog, states)
    assert result == states
    assert result is not states
    assert disable_flag(catalog.require("BASE"), None) == {}
