"""Build flags implied by a translated board template."""

from __future__ import annotations

from dataclasses import replace

from flagctl.core.model import Flag, FlagCatalog, normalize_key
from flagctl.templates.device import DeviceConfiguration

CORE_FLAG = "SUPLA_CONFIG"
RELAY_FLAG = "SUPLA_RELAY"
BUTTON_FLAG = "SUPLA_BUTTON"
LED_FLAG = "SUPLA_LED"
RGBW_FLAG = "SUPLA_RGBW"
LIMIT_SWITCH_FLAG = "SUPLA_LIMIT_SWITCH"
CONDITIONS_FLAG = "SUPLA_CONDITIONS"
DS18B20_FLAG = "SUPLA_DS18B20"
POWER_MONITOR_FLAG = "SUPLA_HLW8012"

# Whole role tokens, so BUTTON_CFG does not read as a CF pin.
_POWER_MONITOR_TOKENS = frozenset({"CF", "CF1", "SEL"})

_ROLE_SUBSTRING_FLAGS: tuple[tuple[str, str], ...] = (
    ("DS18B20", DS18B20_FLAG),
    ("SI7021", "SUPLA_SI7021_SONOFF"),
    ("CSE7766", "SUPLA_CSE7766"),
    ("NTC", "SUPLA_NTC_10K"),
    ("ADE7953", "SUPLA_ADE7953"),
    ("RGBW", RGBW_FLAG),
)


def _role_flags(role: str) -> set[str]:
    upper = role.upper()
    flags: set[str] = set()
    if _POWER_MONITOR_TOKENS.intersection(upper.split("_")):
        flags.add(POWER_MONITOR_FLAG)
    for fragment, flag in _ROLE_SUBSTRING_FLAGS:
        if fragment in upper:
            flags.add(flag)
    return flags


def select_build_flags(config: DeviceConfiguration | None) -> set[str]:
    if config is None:
        return set()

    selected = {CORE_FLAG}
    if config.max_relays > 0:
        selected.add(RELAY_FLAG)
    if config.max_buttons > 0:
        selected.add(BUTTON_FLAG)
    if config.max_leds > 0:
        selected.add(LED_FLAG)
    if config.max_rgbw > 0:
        selected.add(RGBW_FLAG)
    if config.max_limit_switches > 0:
        selected.add(LIMIT_SWITCH_FLAG)
    if config.max_conditions > 0:
        selected.add(CONDITIONS_FLAG)
    if config.max_ds18b20 > 0:
        selected.add(DS18B20_FLAG)

    for role in config.pins.values():
        if role:
            selected |= _role_flags(role)

    selected.update(f"SUPLA_{expander.kind.value}" for expander in config.expanders)
    return selected


def create_enabled_build_flags(
    config: DeviceConfiguration | None,
    catalog: FlagCatalog | None,
) -> list[Flag]:
    """Enabled copies of the catalog flags selected for ``config``, in catalog order."""
    if config is None or catalog is None:
        return []

    matched: dict[str, Flag] = {}
    for key in select_build_flags(config):
        flag = catalog.find(key)
        if flag is not None:
            matched[normalize_key(flag.key)] = flag

    return [
        replace(flag, enabled=True)
        for flag in catalog
        if normalize_key(flag.key) in matched
    ]


def configuration_summary(config: DeviceConfiguration | None) -> str:
    if config is None:
        return "No configuration available"

    features: list[str] = []
    if config.max_relays > 0:
        features.append(f"{config.max_relays} relay(s)")
    if config.max_buttons > 0:
        features.append(f"{config.max_buttons} button(s)")
    if config.max_leds > 0:
        features.append(f"{config.max_leds} LED(s)")
    if config.max_rgbw > 0:
        features.append(f"{config.max_rgbw} RGBW channel(s)")
    if config.max_limit_switches > 0:
        features.append(f"{config.max_limit_switches} limit switch(es)")
    if config.max_conditions > 0:
        features.append(f"{config.max_conditions} condition(s)")
    if config.max_ds18b20 > 0:
        features.append(f"{config.max_ds18b20} DS18B20 sensor(s)")
    if config.analog_buttons:
        features.append(f"{len(config.analog_buttons)} analog button(s)")
    if config.expanders:
        features.append(f"{len(config.expanders)} expander(s)")

    host = config.host_name
    if not features:
        return f"{host}: No features detected"
    return f"{host}: " + ", ".join(features)
