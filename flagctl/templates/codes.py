"""Pin-function code tables for board templates.

Templates come in two numbering schemes. Version 1 templates carry exactly
13 codes in the legacy numbering and are converted with
:data:`LEGACY_CODE_MAP`; everything else uses the current numbering, where a
few functions are accepted under more than one value and are folded with
:data:`CURRENT_CODE_ALIASES`. :data:`PIN_ROLES` then says what each canonical
code does to a device configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

LEGACY_PIN_COUNT = 13

# Physical GPIO numbers of the first 13 template slots; later slots map 1:1.
PHYSICAL_PINS: tuple[int, ...] = (0, 1, 2, 3, 4, 5, 9, 10, 12, 13, 14, 15, 16)


class GpioFunction(IntEnum):
    NONE = 0
    USERS = 1

    I2C_SCL = 544
    I2C_SDA = 640
    I2C_SCL2 = 608
    I2C_SDA2 = 576

    RELAY1 = 224
    RELAY2 = 225
    RELAY3 = 226
    RELAY4 = 227
    RELAY5 = 228
    RELAY6 = 229
    RELAY7 = 230
    RELAY8 = 231

    RELAY1_INV = 320
    RELAY2_INV = 321
    RELAY3_INV = 322
    RELAY4_INV = 323
    RELAY5_INV = 324
    RELAY6_INV = 325
    RELAY7_INV = 326
    RELAY8_INV = 327

    SWITCH1 = 32
    SWITCH2 = 33
    SWITCH3 = 34
    SWITCH4 = 35
    SWITCH5 = 36
    SWITCH6 = 37
    SWITCH7 = 38

    SWITCH1_NOPULLUP = 160
    SWITCH2_NOPULLUP = 161
    SWITCH3_NOPULLUP = 162
    SWITCH4_NOPULLUP = 163
    SWITCH5_NOPULLUP = 164
    SWITCH6_NOPULLUP = 165
    SWITCH7_NOPULLUP = 166

    BUTTON1 = 192
    BUTTON2 = 193
    BUTTON3 = 194
    BUTTON4 = 195

    BUTTON1_NOPULLUP = 3232
    BUTTON2_NOPULLUP = 3233
    BUTTON3_NOPULLUP = 3234
    BUTTON4_NOPULLUP = 3235

    LED1 = 288
    LED2 = 289
    LED3 = 290
    LED4 = 291
    LED_LINK = 292

    LED1_INV = 352
    LED2_INV = 353
    LED3_INV = 354
    LED4_INV = 355
    LED_LINK_INV = 356

    PWM1 = 416
    PWM2 = 417
    PWM3 = 418
    PWM4 = 419
    PWM5 = 420

    PWM1_INV = 448
    PWM2_INV = 449
    PWM3_INV = 450
    PWM4_INV = 451
    PWM5_INV = 452

    HLW8012_CF = 2656
    BL0937_CF = 2688
    HLWBL_CF1 = 2624
    HLWBL_SEL_INV = 2720

    SI7021 = 1248
    DS18X20 = 1216
    CSE7766_RX = 2752
    TEMPERATURE_ANALOG = 4736
    ADE7953_IRQ = 3104

    BINARY1 = 3264
    BINARY2 = 3265
    BINARY3 = 3266
    BINARY4 = 3267

    ETH_POWER = 5024
    ETH_MDC = 5056
    ETH_MDIO = 5088


class ButtonAction(IntEnum):
    TURN_ON = 0
    TURN_OFF = 1
    TOGGLE = 2


class ExpanderKind(str, Enum):
    MCP23017 = "MCP23017"
    PCF8574 = "PCF8574"
    PCF8575 = "PCF8575"


LEGACY_CODE_MAP: dict[int, int] = {
    0: GpioFunction.NONE,
    1: GpioFunction.USERS,
    255: GpioFunction.USERS,
    # relays 21-28, inverted 29-36
    **{21 + i: GpioFunction.RELAY1 + i for i in range(8)},
    **{29 + i: GpioFunction.RELAY1_INV + i for i in range(8)},
    # buttons 17-20, switches 9-15
    **{17 + i: GpioFunction.BUTTON1 + i for i in range(4)},
    **{9 + i: GpioFunction.SWITCH1 + i for i in range(7)},
    # LEDs 52-55, inverted 56-59
    **{52 + i: GpioFunction.LED1 + i for i in range(4)},
    **{56 + i: GpioFunction.LED1_INV + i for i in range(4)},
    157: GpioFunction.LED_LINK,
    158: GpioFunction.LED_LINK_INV,
    # PWM 37-41, inverted 42-46
    **{37 + i: GpioFunction.PWM1 + i for i in range(5)},
    **{42 + i: GpioFunction.PWM1_INV + i for i in range(5)},
    132: GpioFunction.HLWBL_CF1,
    133: GpioFunction.HLW8012_CF,
    134: GpioFunction.BL0937_CF,
    131: GpioFunction.HLWBL_SEL_INV,
    5: GpioFunction.I2C_SCL,
    6: GpioFunction.I2C_SDA,
    4: GpioFunction.DS18X20,
    7: GpioFunction.SI7021,
}

# Values with a second encoding in current templates. Applied once, not chained.
CURRENT_CODE_ALIASES: dict[int, int] = {
    GpioFunction.RELAY1_INV: GpioFunction.LED1_INV,
    GpioFunction.SWITCH1: GpioFunction.BUTTON1,
    GpioFunction.I2C_SDA2: GpioFunction.LED_LINK_INV,
    GpioFunction.HLW8012_CF: GpioFunction.HLWBL_CF1,
    GpioFunction.HLWBL_SEL_INV: GpioFunction.BL0937_CF,
    GpioFunction.HLWBL_CF1: GpioFunction.HLWBL_SEL_INV,
}


class RoleKind(str, Enum):
    IGNORE = "ignore"
    PIN = "pin"
    RELAY = "relay"
    BUTTON = "button"
    LED = "led"
    RGBW = "rgbw"
    LIMIT_SWITCH = "limit_switch"
    DS18B20 = "ds18b20"


@dataclass(frozen=True)
class PinRole:
    """What a canonical code contributes to a device configuration."""

    kind: RoleKind
    number: int = 0
    inverted: bool = False
    pullup: bool = True
    event: str = ""
    role: str = ""
    config_button: bool = False


_IGNORE = PinRole(RoleKind.IGNORE)


def _pin(role: str) -> PinRole:
    return PinRole(RoleKind.PIN, role=role)


def _relay(number: int, inverted: bool) -> PinRole:
    return PinRole(RoleKind.RELAY, number=number, inverted=inverted)


def _button(number: int, event: str, pullup: bool, *, config_button: bool = False) -> PinRole:
    return PinRole(
        RoleKind.BUTTON,
        number=number,
        event=event,
        pullup=pullup,
        inverted=pullup,
        config_button=config_button,
    )


def _led(number: int, inverted: bool) -> PinRole:
    return PinRole(RoleKind.LED, number=number, inverted=inverted)


def _rgbw(channel: str) -> PinRole:
    return PinRole(RoleKind.RGBW, role=channel)


PIN_ROLES: dict[GpioFunction, PinRole] = {
    GpioFunction.NONE: _IGNORE,
    GpioFunction.USERS: _IGNORE,
    GpioFunction.I2C_SCL: _pin("SCL"),
    GpioFunction.I2C_SDA: _pin("SDA"),
    GpioFunction.I2C_SCL2: _pin("SCL2"),
    GpioFunction.I2C_SDA2: _pin("SDA2"),
    **{GpioFunction(GpioFunction.RELAY1 + i): _relay(i, False) for i in range(8)},
    **{GpioFunction(GpioFunction.RELAY1_INV + i): _relay(i, True) for i in range(8)},
    **{GpioFunction(GpioFunction.SWITCH1 + i): _button(i, "ON_CHANGE", True) for i in range(7)},
    **{GpioFunction(GpioFunction.SWITCH1_NOPULLUP + i): _button(i, "ON_CHANGE", False) for i in range(4)},
    GpioFunction.BUTTON1: _button(0, "ON_PRESS", True, config_button=True),
    GpioFunction.BUTTON2: _button(1, "ON_PRESS", True),
    GpioFunction.BUTTON3: _button(2, "ON_PRESS", True),
    GpioFunction.BUTTON4: _button(3, "ON_PRESS", True),
    GpioFunction.BUTTON1_NOPULLUP: _button(0, "ON_PRESS", False, config_button=True),
    GpioFunction.BUTTON2_NOPULLUP: _button(1, "ON_PRESS", False),
    GpioFunction.LED1: _led(0, False),
    GpioFunction.LED_LINK: _led(0, False),
    GpioFunction.LED2: _led(1, False),
    GpioFunction.LED3: _led(2, False),
    GpioFunction.LED1_INV: _led(0, True),
    GpioFunction.LED_LINK_INV: _led(0, True),
    GpioFunction.LED2_INV: _led(1, True),
    GpioFunction.LED3_INV: _led(2, True),
    GpioFunction.PWM1: _rgbw("BRIGHTNESS"),
    GpioFunction.PWM1_INV: _rgbw("BRIGHTNESS"),
    GpioFunction.PWM2: _pin("RGBW_GREEN"),
    GpioFunction.PWM2_INV: _pin("RGBW_GREEN"),
    GpioFunction.PWM3: _pin("RGBW_BLUE"),
    GpioFunction.PWM3_INV: _pin("RGBW_BLUE"),
    GpioFunction.PWM4: _pin("RGBW_BRIGHTNESS"),
    GpioFunction.PWM4_INV: _pin("RGBW_BRIGHTNESS"),
    GpioFunction.PWM5: _rgbw("BRIGHTNESS_2"),
    GpioFunction.PWM5_INV: _rgbw("BRIGHTNESS_2"),
    GpioFunction.HLW8012_CF: _pin("CF"),
    GpioFunction.BL0937_CF: _pin("CF"),
    GpioFunction.HLWBL_CF1: _pin("CF1"),
    GpioFunction.HLWBL_SEL_INV: _pin("SEL"),
    GpioFunction.SI7021: _pin("SI7021_SONOFF"),
    GpioFunction.DS18X20: PinRole(RoleKind.DS18B20, role="DS18B20"),
    GpioFunction.CSE7766_RX: _pin("CSE7766_RX"),
    GpioFunction.TEMPERATURE_ANALOG: _pin("NTC_10K"),
    GpioFunction.ADE7953_IRQ: _pin("ADE7953_IRQ"),
    **{GpioFunction(GpioFunction.BINARY1 + i): PinRole(RoleKind.LIMIT_SWITCH, number=i) for i in range(4)},
}


def physical_pin(index: int) -> int:
    if 0 <= index < len(PHYSICAL_PINS):
        return PHYSICAL_PINS[index]
    return index


def canonical_code(code: int, *, legacy: bool) -> int:
    if legacy:
        return LEGACY_CODE_MAP.get(code, code)
    return CURRENT_CODE_ALIASES.get(code, code)


def pin_role(code: int) -> PinRole | None:
    """Role for a canonical code, or ``None`` when the code is unknown or unsupported."""
    try:
        function = GpioFunction(code)
    except ValueError:
        return None
    return PIN_ROLES.get(function)
