"""Structured device configuration built from a board template."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

from flagctl.templates.codes import ButtonAction, ExpanderKind

DEFAULT_HOST_NAME = "SUPLA-Device"
DEFAULT_CONFIG_MODE = "CONFIG_MODE_10_ON_PRESSES"
UNASSIGNED_PIN = "OFF"


@dataclass(frozen=True)
class RelayConfig:
    number: int
    gpio: int
    inverted: bool


@dataclass(frozen=True)
class ButtonConfig:
    number: int
    gpio: int
    event: str
    pullup: bool
    inverted: bool
    action: ButtonAction


@dataclass(frozen=True)
class AnalogButtonConfig:
    number: int
    expected_value: int
    action: ButtonAction


@dataclass(frozen=True)
class LedConfig:
    number: int
    gpio: int
    inverted: bool


@dataclass(frozen=True)
class RgbwConfig:
    gpio: int
    channel: str
    inverted: bool


@dataclass(frozen=True)
class LimitSwitchConfig:
    number: int
    gpio: int


@dataclass(frozen=True)
class ExpanderConfig:
    kind: ExpanderKind
    payload: list[Any]


@dataclass(frozen=True)
class Condition:
    executive_type: int
    executive_number: int
    sensor_type: int
    sensor_number: int
    condition_type: int
    value_on: str
    value_off: str

    @classmethod
    def from_values(cls, values: Sequence[Any]) -> Condition:
        """Build from the seven raw values of a template ``COND`` entry."""
        if len(values) < 7:
            raise ValueError(f"expected 7 values, got {len(values)}")
        return cls(
            executive_type=_as_int(values[0]),
            executive_number=_as_int(values[1]),
            sensor_type=_as_int(values[2]),
            sensor_number=_as_int(values[3]),
            condition_type=_as_int(values[4]),
            value_on=_as_text(values[5]),
            value_off=_as_text(values[6]),
        )


def _as_int(value: Any) -> int:
    if isinstance(value, bool) or value is None:
        raise TypeError(f"expected a number, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"expected a whole number, got {value!r}")
        return int(value)
    return int(value)


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def _button_action(number: int, actions: Sequence[int] | None) -> ButtonAction:
    if actions is None or number >= len(actions):
        return ButtonAction.TOGGLE
    try:
        return ButtonAction(actions[number])
    except ValueError:
        return ButtonAction.TOGGLE


@dataclass
class DeviceConfiguration:
    host_name: str = ""
    flash_size: str = ""
    config_mode: str = DEFAULT_CONFIG_MODE
    pins: dict[int, str] = field(default_factory=dict)
    relays: list[RelayConfig] = field(default_factory=list)
    buttons: list[ButtonConfig] = field(default_factory=list)
    analog_buttons: list[AnalogButtonConfig] = field(default_factory=list)
    leds: list[LedConfig] = field(default_factory=list)
    rgbws: list[RgbwConfig] = field(default_factory=list)
    limit_switches: list[LimitSwitchConfig] = field(default_factory=list)
    conditions: list[Condition] = field(default_factory=list)
    expanders: list[ExpanderConfig] = field(default_factory=list)
    max_relays: int = 0
    max_buttons: int = 0
    max_leds: int = 0
    max_rgbw: int = 0
    max_limit_switches: int = 0
    max_conditions: int = 0
    max_ds18b20: int = 0

    def clear(self) -> None:
        self.host_name = ""
        self.flash_size = ""
        self.pins.clear()
        self.relays.clear()
        self.buttons.clear()
        self.analog_buttons.clear()
        self.leds.clear()
        self.rgbws.clear()
        self.limit_switches.clear()
        self.conditions.clear()
        self.expanders.clear()
        self.max_relays = 0
        self.max_buttons = 0
        self.max_leds = 0
        self.max_rgbw = 0
        self.max_limit_switches = 0
        self.max_conditions = 0
        self.max_ds18b20 = 0

    def set_pin(self, pin: int, role: str) -> None:
        self.pins[pin] = role

    def get_pin(self, pin: int) -> str:
        return self.pins.get(pin, UNASSIGNED_PIN)

    def add_relay(self, number: int, gpio: int, inverted: bool) -> None:
        self.relays.append(RelayConfig(number=number, gpio=gpio, inverted=inverted))
        self.max_relays = max(self.max_relays, number + 1)

    def add_button(
        self,
        number: int,
        gpio: int,
        event: str,
        pullup: bool,
        inverted: bool,
        actions: Sequence[int] | None = None,
    ) -> None:
        self.buttons.append(
            ButtonConfig(
                number=number,
                gpio=gpio,
                event=event,
                pullup=pullup,
                inverted=inverted,
                action=_button_action(number, actions),
            )
        )
        self.max_buttons = max(self.max_buttons, number + 1)

    def add_config_button(self, gpio: int) -> None:
        self.set_pin(gpio, "BUTTON_CFG")

    def add_analog_button(self, number: int, expected_value: int, actions: Sequence[int] | None = None) -> None:
        self.analog_buttons.append(
            AnalogButtonConfig(
                number=number,
                expected_value=expected_value,
                action=_button_action(number, actions),
            )
        )

    def add_led(self, number: int, gpio: int, inverted: bool) -> None:
        self.leds.append(LedConfig(number=number, gpio=gpio, inverted=inverted))
        self.max_leds = max(self.max_leds, number + 1)

    def add_rgbw(self, gpio: int, channel: str, inverted: bool) -> None:
        self.rgbws.append(RgbwConfig(gpio=gpio, channel=channel, inverted=inverted))
        self.max_rgbw += 1

    def add_limit_switch(self, number: int, gpio: int) -> None:
        self.limit_switches.append(LimitSwitchConfig(number=number, gpio=gpio))
        self.max_limit_switches = max(self.max_limit_switches, number + 1)

    def add_condition(self, condition: Condition) -> None:
        self.conditions.append(condition)
        self.max_conditions += 1

    def add_expander(self, kind: ExpanderKind | str, payload: list[Any]) -> None:
        self.expanders.append(ExpanderConfig(kind=ExpanderKind(kind), payload=payload))

    def to_dict(self) -> dict[str, Any]:
        config: dict[str, Any] = {
            "host_name": self.host_name or DEFAULT_HOST_NAME,
            "max_relays": self.max_relays,
            "max_buttons": self.max_buttons,
            "max_leds": self.max_leds,
            "max_rgbw": self.max_rgbw,
            "max_limit_switches": self.max_limit_switches,
            "max_conditions": self.max_conditions,
            "config_mode": self.config_mode,
            "relays": [asdict(r) for r in self.relays],
            "buttons": [asdict(b) | {"action": b.action.name} for b in self.buttons],
            "leds": [asdict(led) for led in self.leds],
            "rgbws": [asdict(c) for c in self.rgbws],
            "limit_switches": [asdict(s) for s in self.limit_switches],
            "conditions": [asdict(c) for c in self.conditions],
            "analog_buttons": [asdict(a) | {"action": a.action.name} for a in self.analog_buttons],
            "expanders": [{"kind": e.kind.value, "payload": e.payload} for e in self.expanders],
            "pins": dict(sorted(self.pins.items())),
        }
        if self.flash_size:
            config["flash_size"] = self.flash_size
        if self.max_ds18b20 > 0:
            config["max_ds18b20"] = self.max_ds18b20
        return config
