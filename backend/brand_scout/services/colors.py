import re

_FUNCTIONAL_RE = re.compile(r"^(rgba?|hsla?|hwb|lab|lch|oklab|oklch|color)\((.*)\)$")
_HEX_RE = re.compile(r"^#([0-9a-f]{3,4}|[0-9a-f]{6}|[0-9a-f]{8})$")
_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)(e[+-]?\d+)?%?$")

_NO_COLOR = {"", "transparent", "none", "initial", "unset", "inherit", "currentcolor"}


def _parse_alpha(token: str) -> float | None:
    token = token.strip()
    if not _NUMBER_RE.match(token):
        return None
    if token.endswith("%"):
        return float(token[:-1]) / 100
    return float(token)


def color_alpha(value: str | None) -> float | None:
    """Return the alpha channel of a CSS color string, or None if unrecognized."""
    if value is None:
        return None
    color = value.strip().lower()
    if color in _NO_COLOR:
        return 0.0 if color in ("transparent", "none") else None

    hex_match = _HEX_RE.match(color)
    if hex_match:
        digits = hex_match.group(1)
        if len(digits) == 4:
            return int(digits[3] * 2, 16) / 255
        if len(digits) == 8:
            return int(digits[6:], 16) / 255
        return 1.0

    func_match = _FUNCTIONAL_RE.match(color)
    if not func_match:
        return None

    args = func_match.group(2)
    if "/" in args:
        _, alpha = args.rsplit("/", 1)
        return _parse_alpha(alpha)

    parts = [p for p in re.split(r"[,\s]+", args.strip()) if p]
    if func_match.group(1) == "color":
        # color(<space> c1 c2 c3)
        parts = parts[1:]
    if len(parts) == 4:
        return _parse_alpha(parts[3])
    if len(parts) == 3:
        return 1.0
    return None


def is_painted(value: str | None) -> bool:
    """True when ``value`` is a recognized CSS color with non-zero alpha.

    Transparent keywords and any zero-alpha color count as unpainted whatever
    their RGB channels are. Unrecognized strings are treated as unpainted.
    """
    alpha = color_alpha(value)
    return alpha is not None and alpha > 0


def parse_px(value: str | None) -> float:
    """Largest pixel length in a computed value such as ``"0px 2px"``."""
    if not value:
        return 0.0
    numbers = re.findall(r"-?\d+(?:\.\d+)?", value)
    if not numbers:
        return 0.0
    return max(float(n) for n in numbers)


def primary_font(font_family: str | None) -> str:
    """First family of a font stack with quotes stripped."""
    if not font_family:
        return ""
    return font_family.split(",")[0].strip().strip("\"'").strip()
