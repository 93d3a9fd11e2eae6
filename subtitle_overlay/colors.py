"""ASS colour decoding helpers."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from PIL import ImageColor

_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")


@dataclass(frozen=True)
class Rgba:
    r: int
    g: int
    b: int
    a: float = 1.0

    def to_css(self) -> str:
        return f"rgba({self.r}, {self.g}, {self.b}, {self.a:.2f})"

    @classmethod
    def from_name(cls, value: str) -> "Rgba":
        """Resolve a CSS colour name or ``#rrggbb[aa]`` string with Pillow."""
        r, g, b, a = ImageColor.getcolor(value.strip(), "RGBA")
        return cls(r, g, b, round(a / 255, 2))


WHITE = Rgba(255, 255, 255, 1.0)
BLACK = Rgba(0, 0, 0, 1.0)


def strip_ass_delimiters(token: str) -> str:
    text = token.strip()
    if text[:2].upper() == "&H":
        text = text[2:]
    elif text[:1].upper() == "H":
        text = text[1:]
    return text.replace("&", "")


def decode_ass_color(token: Optional[str]) -> Optional[Rgba]:
    """Decode ``[AA]BBGGRR`` (ASS byte order) into RGBA.

    Alpha follows the ASS convention: 0x00 is opaque, 0xFF transparent.
    Returns ``None`` when the token is empty or not hexadecimal.
    """
    if not token:
        return None
    digits = strip_ass_delimiters(token)
    if not digits or not _HEX_RE.match(digits) or len(digits) > 8:
        return None

    digits = digits.rjust(6, "0")
    alpha = 1.0
    if len(digits) == 7:
        digits = digits.rjust(8, "0")
    if len(digits) == 8:
        alpha = round(1 - int(digits[:2], 16) / 255, 2)
        digits = digits[2:]

    blue = int(digits[0:2], 16)
    green = int(digits[2:4], 16)
    red = int(digits[4:6], 16)
    return Rgba(red, green, blue, alpha)
