import re

from typing import Tuple

from apptargets.errors import ConfigurationError

RGBA = Tuple[int, int, int, int]

NAMED_COLORS = {
    "black": (0, 0, 0, 255),
    "white": (255, 255, 255, 255),
    "red": (255, 0, 0, 255),
    "green": (0, 128, 0, 255),
    "blue": (0, 0, 255, 255),
    "transparent": (0, 0, 0, 0),
}

FUNCTIONAL = re.compile(r"rgba?\(\s*([^)]*)\)")


def _channel(value: str) -> int:
    value = value.strip()
    if value.endswith("%"):
        return round(float(value[:-1]) * 2.55)
    return int(float(value))


def _alpha(value: str) -> int:
    value = value.strip()
    if value.endswith("%"):
        return round(float(value[:-1]) * 2.55)
    return round(float(value) * 255)


def parse_color(value: str) -> RGBA:
    color = value.strip().lower()
    if color in NAMED_COLORS:
        return NAMED_COLORS[color]
    if color.startswith("#"):
        digits = color[1:]
        # Short forms repeat each digit
        if len(digits) in (3, 4):
            digits = "".join(d * 2 for d in digits)
        if len(digits) == 6:
            digits += "ff"
        if len(digits) == 8 and re.fullmatch(r"[0-9a-f]{8}", digits):
            r, g, b, a = (int(digits[i : i + 2], 16) for i in range(0, 8, 2))
            return r, g, b, a
    match = FUNCTIONAL.fullmatch(color)
    if match:
        parts = [p for p in re.split(r"[\s,/]+", match.group(1)) if p]
        try:
            if len(parts) == 3:
                r, g, b = (_channel(p) for p in parts)
                return r, g, b, 255
            if len(parts) == 4:
                r, g, b = (_channel(p) for p in parts[:3])
                return r, g, b, _alpha(parts[3])
        except ValueError:
            pass
    raise ConfigurationError(f"invalid color '{value}'")


# Android color resources are #AARRGGBB
def to_android_hex(value: str) -> str:
    r, g, b, a = parse_color(value)
    return f"#{a:02X}{r:02X}{g:02X}{b:02X}"


def to_srgb_components(value: str) -> dict:
    r, g, b, a = parse_color(value)
    return {
        "red": f"{r / 255:.3f}",
        "green": f"{g / 255:.3f}",
        "blue": f"{b / 255:.3f}",
        "alpha": f"{a / 255:.3f}",
    }
