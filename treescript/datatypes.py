"""
Value types stored in instance properties.

These mirror the host engine's built-in datatypes. They are immutable and
compare by value, which is what the default-state diff relies on: a
property is emitted only when its value differs from the value held by a
freshly created instance of the same class.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Vector2:
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class Vector3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass(frozen=True)
class Color3:
    """RGB color with channels in [0, 1]."""

    r: float = 0.0
    g: float = 0.0
    b: float = 0.0

    @classmethod
    def from_rgb(cls, r: int, g: int, b: int) -> 'Color3':
        return cls(r / 255, g / 255, b / 255)


@dataclass(frozen=True)
class UDim:
    scale: float = 0.0
    offset: int = 0


@dataclass(frozen=True)
class UDim2:
    x_scale: float = 0.0
    x_offset: int = 0
    y_scale: float = 0.0
    y_offset: int = 0


IDENTITY_ROTATION = (1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0)


@dataclass(frozen=True)
class CFrame:
    """
    Coordinate frame: a position plus a row-major 3x3 rotation matrix.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    rotation: tuple = IDENTITY_ROTATION

    def __post_init__(self):
        if len(self.rotation) != 9:
            raise ValueError("CFrame rotation must have 9 components")
        object.__setattr__(self, "rotation", tuple(float(v) for v in self.rotation))

    def components(self) -> tuple:
        return (self.x, self.y, self.z) + self.rotation


@dataclass(frozen=True)
class BrickColor:
    """Palette color addressed by name, e.g. BrickColor("Bright red")."""

    name: str = "Medium stone grey"


@dataclass(frozen=True)
class NumberRange:
    min: float = 0.0
    max: float = 0.0


@dataclass(frozen=True)
class EnumItem:
    """A member of a host enum, e.g. EnumItem("Material", "Plastic")."""

    enum_type: str
    name: str

    @classmethod
    def parse(cls, text: str) -> 'EnumItem':
        """Parse "Material.Plastic" or "Enum.Material.Plastic"."""
        parts = text.split(".")
        if parts[0] == "Enum":
            parts = parts[1:]
        if len(parts) != 2 or not all(parts):
            raise ValueError(f"invalid enum item: {text!r}")
        return cls(parts[0], parts[1])


DATATYPES: dict[str, type] = {
    cls.__name__: cls
    for cls in (Vector2, Vector3, Color3, UDim, UDim2, CFrame, BrickColor, NumberRange)
}


def decode_value(raw):
    """
    Decode a JSON property value into a datatype where it is tagged as one.

    Tagged values are single-key objects naming the type:

        {"Vector3": [0, 10, 0]}
        {"CFrame": [0, 5, 0]}              position only
        {"BrickColor": "Bright red"}
        {"Enum": "Material.Neon"}

    Anything else is returned unchanged.
    """
    if not isinstance(raw, dict) or len(raw) != 1:
        return raw
    ((key, args),) = raw.items()
    if key == "Enum":
        return EnumItem.parse(args)
    cls = DATATYPES.get(key)
    if cls is None:
        return raw
    if cls is BrickColor:
        return BrickColor(args)
    if cls is CFrame:
        x, y, z, *rotation = args
        return CFrame(x, y, z, tuple(rotation) if rotation else IDENTITY_ROTATION)
    if isinstance(args, dict):
        return cls(**args)
    return cls(*args)
