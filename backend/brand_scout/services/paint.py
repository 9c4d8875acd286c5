"""
Paint resolution: find the style that actually carries a button's color.

Component-library buttons rarely paint the clickable element itself. The fill
is often a ``::before``/``::after`` overlay or an inner wrapper, so the
resolver walks self → pseudo-elements → descendants and returns the first
painted layer it finds.
"""

from dataclasses import dataclass

from brand_scout.services.colors import is_painted, parse_px, primary_font
from brand_scout.services.snapshot import NodeSnapshot, StyleRecord

SOURCE_SELF = "self"
SOURCE_BEFORE = "::before"
SOURCE_AFTER = "::after"
SOURCE_DESCENDANT = "descendant"


@dataclass(frozen=True)
class ResolvedStyle:
    background_color: str
    color: str
    border_radius: str
    font_family: str
    source: str = SOURCE_SELF

    @classmethod
    def from_style(cls, style: StyleRecord, source: str) -> "ResolvedStyle":
        return cls(
            background_color=style.background_color,
            color=style.color,
            border_radius=style.border_radius,
            font_family=primary_font(style.font_family),
            source=source,
        )

    @property
    def has_background(self) -> bool:
        return is_painted(self.background_color)

    def to_dict(self) -> dict:
        return {
            "bg": self.background_color,
            "color": self.color,
            "radius": self.border_radius,
            "font": self.font_family,
        }


def has_own_paint(style: StyleRecord) -> bool:
    """Painted background, or a visible border of positive width."""
    if is_painted(style.background_color):
        return True
    return parse_px(style.border_width) > 0 and is_painted(style.border_color)


def _largest_painted_descendant(node: NodeSnapshot) -> NodeSnapshot | None:
    best = None
    best_area = 0.0
    for child in node.descendants:
        if not is_painted(child.style.background_color):
            continue
        # Strict comparison keeps the first node in document order on ties.
        if best is None or child.box.area > best_area:
            best = child
            best_area = child.box.area
    return best


def resolve_paint(node: NodeSnapshot | None) -> ResolvedStyle | None:
    """Return the paint-bearing style for ``node``, or None if nothing is painted."""
    if node is None:
        return None

    if has_own_paint(node.style):
        return ResolvedStyle.from_style(node.style, SOURCE_SELF)

    if node.before is not None and is_painted(node.before.background_color):
        return ResolvedStyle.from_style(node.before, SOURCE_BEFORE)

    if node.after is not None and is_painted(node.after.background_color):
        return ResolvedStyle.from_style(node.after, SOURCE_AFTER)

    child = _largest_painted_descendant(node)
    if child is not None:
        return ResolvedStyle.from_style(child.style, SOURCE_DESCENDANT)

    return None
