"""Board template translation into a :class:`DeviceConfiguration`."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from jsonschema import ValidationError

from flagctl.core.catalog_loader import load_schema_validator
from flagctl.templates.codes import (
    LEGACY_PIN_COUNT,
    ExpanderKind,
    PinRole,
    RoleKind,
    canonical_code,
    physical_pin,
    pin_role,
)
from flagctl.templates.device import Condition, DeviceConfiguration

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoardTemplate:
    name: str
    gpio: tuple[int, ...]
    analog_buttons: tuple[int, ...] = ()
    button_actions: tuple[int, ...] | None = None
    conditions: tuple[list[Any], ...] = ()
    flash_size: str = ""
    expanders: dict[ExpanderKind, tuple[list[Any], ...]] = field(default_factory=dict)

    @property
    def is_legacy(self) -> bool:
        return len(self.gpio) == LEGACY_PIN_COUNT

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> BoardTemplate:
        actions = doc.get("BTNACTION")
        return cls(
            name=doc.get("NAME") or "",
            gpio=tuple(doc.get("GPIO") or ()),
            analog_buttons=tuple(doc.get("BTNADC") or ()),
            button_actions=tuple(actions) if actions is not None else None,
            conditions=tuple(doc.get("COND") or ()),
            flash_size=doc.get("FLASH") or "",
            expanders={
                kind: tuple(doc[kind.value])
                for kind in ExpanderKind
                if doc.get(kind.value)
            },
        )


@dataclass(frozen=True)
class ParsedTemplate:
    config: DeviceConfiguration
    warnings: tuple[str, ...]


class _Translation:
    def __init__(self, template: BoardTemplate) -> None:
        self.template = template
        self.config = DeviceConfiguration()
        self.warnings: list[str] = []

    def warn(self, message: str) -> None:
        LOGGER.debug("%s: %s", self.template.name or "<template>", message)
        self.warnings.append(message)

    def run(self) -> None:
        template = self.template
        self.config.clear()
        self.config.host_name = template.name
        self.config.flash_size = template.flash_size
        self.warn(f"Template version {1 if template.is_legacy else 2}")

        self._analog_buttons()
        self._conditions()
        self._pins()
        self._expanders()

    def _analog_buttons(self) -> None:
        for number, expected in enumerate(self.template.analog_buttons):
            if expected != 0:
                self.config.add_analog_button(number, expected, self.template.button_actions)

    def _conditions(self) -> None:
        for values in self.template.conditions:
            try:
                condition = Condition.from_values(values)
            except (ValueError, TypeError, IndexError) as exc:
                self.warn(f"Failed to parse condition {values!r}: {exc}")
                continue
            self.config.add_condition(condition)

    def _pins(self) -> None:
        legacy = self.template.is_legacy
        for index, raw_code in enumerate(self.template.gpio):
            pin = physical_pin(index)
            code = canonical_code(raw_code, legacy=legacy)
            role = pin_role(code)
            if role is None:
                self.warn(f"Unsupported pin function code: {code}")
                continue
            self._apply(pin, role)

    def _apply(self, pin: int, role: PinRole) -> None:
        config = self.config
        actions = self.template.button_actions
        if role.kind is RoleKind.IGNORE:
            return
        if role.kind is RoleKind.PIN:
            config.set_pin(pin, role.role)
        elif role.kind is RoleKind.RELAY:
            config.add_relay(role.number, pin, role.inverted)
        elif role.kind is RoleKind.BUTTON:
            config.add_button(role.number, pin, role.event, role.pullup, role.inverted, actions)
            if role.config_button:
                config.add_config_button(pin)
        elif role.kind is RoleKind.LED:
            config.add_led(role.number, pin, role.inverted)
        elif role.kind is RoleKind.RGBW:
            config.add_rgbw(pin, role.role, role.inverted)
        elif role.kind is RoleKind.LIMIT_SWITCH:
            config.add_limit_switch(role.number, pin)
        elif role.kind is RoleKind.DS18B20:
            config.set_pin(pin, role.role)
            config.max_ds18b20 = 1

    def _expanders(self) -> None:
        for kind, entries in self.template.expanders.items():
            for payload in entries:
                self.config.add_expander(kind, payload)


def read_template(text: str | None) -> tuple[BoardTemplate | None, str | None]:
    """Decode and validate template text; returns the template or a warning."""
    if not text or not text.strip():
        return None, "Invalid or empty template: no content"
    try:
        doc = json.loads(text)
    except (json.JSONDecodeError, RecursionError) as exc:
        return None, f"JSON parse error: {exc}"
    if not isinstance(doc, dict):
        return None, "Invalid template: expected a JSON object"

    validator = load_schema_validator("template.schema.json")
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        return None, f"Invalid template{where}: {exc.message}"

    template = BoardTemplate.from_document(doc)
    if not template.gpio:
        return None, "Invalid or empty GPIO configuration"
    return template, None


def parse_template(text: str | None) -> ParsedTemplate:
    """Translate template text; problems come back as warnings, never exceptions."""
    template, error = read_template(text)
    if template is None:
        LOGGER.debug("Template rejected: %s", error)
        return ParsedTemplate(config=DeviceConfiguration(), warnings=(error or "Invalid template",))

    translation = _Translation(template)
    translation.run()
    return ParsedTemplate(config=translation.config, warnings=tuple(translation.warnings))


class TemplateParser:
    """Stateful wrapper keeping the latest configuration and its warnings."""

    def __init__(self) -> None:
        self.config = DeviceConfiguration()
        self._warnings: tuple[str, ...] = ()

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._warnings

    def reset(self) -> None:
        self.config = DeviceConfiguration()
        self._warnings = ()

    def parse(self, text: str | None) -> DeviceConfiguration:
        self.reset()
        parsed = parse_template(text)
        self.config = parsed.config
        self._warnings = parsed.warnings
        return self.config

