"""
Plain data types for computed-style snapshots taken from a rendered page.

The browser adapter serializes DOM nodes into dicts inside ``page.evaluate``;
``NodeSnapshot.from_dict`` turns those into the types the extraction pipeline
works on, so everything downstream of the browser can be exercised with
synthetic trees.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class StyleRecord:
    background_color: str = "rgba(0, 0, 0, 0)"
    color: str = "rgb(0, 0, 0)"
    border_width: str = "0px"
    border_color: str = "rgb(0, 0, 0)"
    border_radius: str = "0px"
    font_family: str = ""
    display: str = "inline"
    visibility: str = "visible"
    opacity: str = "1"

    @classmethod
    def from_dict(cls, data: dict | None) -> "StyleRecord | None":
        if not data:
            return None
        defaults = cls()
        return cls(
            background_color=data.get("backgroundColor") or defaults.background_color,
            color=data.get("color") or defaults.color,
            border_width=data.get("borderWidth") or defaults.border_width,
            border_color=data.get("borderColor") or defaults.border_color,
            border_radius=data.get("borderRadius") or defaults.border_radius,
            font_family=data.get("fontFamily") or defaults.font_family,
            display=data.get("display") or defaults.display,
            visibility=data.get("visibility") or defaults.visibility,
            opacity=str(data.get("opacity", defaults.opacity)),
        )

    @property
    def is_hidden(self) -> bool:
        if self.display == "none" or self.visibility in ("hidden", "collapse"):
            return True
        try:
            return float(self.opacity) <= 0
        except ValueError:
            return False


@dataclass(frozen=True)
class BoundingBox:
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @classmethod
    def from_dict(cls, data: dict | None) -> "BoundingBox":
        if not data:
            return cls()
        return cls(
            x=float(data.get("x", 0)),
            y=float(data.get("y", 0)),
            width=float(data.get("width", 0)),
            height=float(data.get("height", 0)),
        )

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2


@dataclass(frozen=True)
class AncestorInfo:
    tag: str = ""
    element_id: str = ""
    class_name: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "AncestorInfo":
        return cls(
            tag=data.get("tag", ""),
            element_id=data.get("id", "") or "",
            class_name=data.get("className", "") or "",
        )


@dataclass(frozen=True)
class NodeSnapshot:
    tag: str = "div"
    style: StyleRecord = field(default_factory=StyleRecord)
    box: BoundingBox = field(default_factory=BoundingBox)
    before: StyleRecord | None = None
    after: StyleRecord | None = None
    descendants: tuple["NodeSnapshot", ...] = ()
    ancestors: tuple[AncestorInfo, ...] = ()
    element_id: str = ""
    class_name: str = ""
    markup: str = ""
    text: str = ""
    aria_label: str = ""
    index: int = -1

    @classmethod
    def from_dict(cls, data: dict) -> "NodeSnapshot":
        return cls(
            tag=(data.get("tag") or "div").lower(),
            style=StyleRecord.from_dict(data.get("style")) or StyleRecord(),
            box=BoundingBox.from_dict(data.get("box")),
            before=StyleRecord.from_dict(data.get("before")),
            after=StyleRecord.from_dict(data.get("after")),
            descendants=tuple(cls.from_dict(d) for d in data.get("descendants") or []),
            ancestors=tuple(AncestorInfo.from_dict(a) for a in data.get("ancestors") or []),
            element_id=data.get("id", "") or "",
            class_name=data.get("className", "") or "",
            markup=data.get("markup", "") or "",
            text=data.get("text", "") or "",
            aria_label=data.get("ariaLabel", "") or "",
            index=int(data.get("index", -1)),
        )


@dataclass(frozen=True)
class PointProbe:
    """What sits under a screen coordinate: the hit node and its parent."""

    hit: NodeSnapshot
    parent: NodeSnapshot | None = None

    @classmethod
    def from_dict(cls, data: dict | None) -> "PointProbe | None":
        if not data or not data.get("hit"):
            return None
        parent = data.get("parent")
        return cls(
            hit=NodeSnapshot.from_dict(data["hit"]),
            parent=NodeSnapshot.from_dict(parent) if parent else None,
        )


@dataclass(frozen=True)
class PageStyle:
    background_color: str = "rgba(0, 0, 0, 0)"
    body_font: str = ""
    heading_font: str = ""
    heading_color: str = ""
    font_families: tuple[str, ...] = ()
    viewport_width: int = 1440
    viewport_height: int = 900

    @classmethod
    def from_dict(cls, data: dict, viewport_width: int, viewport_height: int) -> "PageStyle":
        return cls(
            background_color=data.get("backgroundColor") or cls.background_color,
            body_font=data.get("bodyFont") or "",
            heading_font=data.get("headingFont") or "",
            heading_color=data.get("headingColor") or "",
            font_families=tuple(dict.fromkeys(data.get("fontFamilies") or [])),
            viewport_width=viewport_width,
            viewport_height=viewport_height,
        )


@dataclass(frozen=True)
class NetworkEvent:
    resource_type: str
    url: str
