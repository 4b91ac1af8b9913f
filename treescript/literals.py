"""
Lua literal formatting for property values.

to_literal() converts a runtime property value into the Lua source that
reconstructs it. Two densities are supported:

- verbose: human-readable, arguments separated by ", "
- compact: size-optimized, no spaces and no leading zeros on fractions

The formatter table maps Python types to formatting functions. Lookup is
by exact type first, then by isinstance() in registration order, so more
specific types must be registered before their bases.

    >>> from treescript.datatypes import Vector3
    >>> to_literal(Vector3(1, 2.5, 0), verbose=True)
    'Vector3.new(1, 2.5, 0)'
    >>> to_literal(Vector3(1, 0.5, 0), verbose=False)
    'Vector3.new(1,.5,0)'

Instance references are never formatted here; the serializer defers them
and resolves them against the whole tree's naming.
"""

from __future__ import annotations

import math
from typing import Any, Callable

from treescript.datatypes import (
    BrickColor,
    CFrame,
    Color3,
    EnumItem,
    IDENTITY_ROTATION,
    NumberRange,
    UDim,
    UDim2,
    Vector2,
    Vector3,
)


Formatter = Callable[[Any, bool], str]

formatter_table: dict[type, Formatter] = {}


def register_formatter(python_type: type | tuple[type, ...], formatter: Formatter) -> None:
    """
    Register a formatter for one or more Python types.

    Args:
        python_type: The type(s) handled by the formatter.
        formatter: Callable taking (value, verbose) and returning Lua source.

    Example:
        >>> register_formatter(Fraction, lambda v, verbose: f"{v.numerator}/{v.denominator}")
    """
    if isinstance(python_type, tuple):
        for t in python_type:
            formatter_table[t] = formatter
    else:
        formatter_table[python_type] = formatter


def to_literal(value: Any, verbose: bool = True) -> str:
    """
    Format a property value as a Lua literal.

    Raises:
        TypeError: If no formatter is registered for the value's type.
    """
    formatter = formatter_table.get(type(value))
    if formatter is None:
        for python_type, candidate in formatter_table.items():
            if isinstance(value, python_type):
                formatter = candidate
                break
        else:
            raise TypeError(f"cannot format value of type {type(value).__name__}")
    return formatter(value, verbose)


# =============================================================================
# Scalars
# =============================================================================

_STRING_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def quote_string(value: str) -> str:
    """Quote a string the way Lua's string.format("%q") would."""
    out = ['"']
    for ch in value:
        escaped = _STRING_ESCAPES.get(ch)
        if escaped is not None:
            out.append(escaped)
        elif ord(ch) < 32 or ord(ch) == 127:
            # Three digits so a following digit is never read as part of it
            out.append(f"\\{ord(ch):03d}")
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


def format_number(value: int | float, verbose: bool = True) -> str:
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "0/0"
    if math.isinf(value):
        return "math.huge" if value > 0 else "-math.huge"
    if value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    text = repr(value)
    if not verbose:
        if text.startswith("0."):
            text = text[1:]
        elif text.startswith("-0."):
            text = "-" + text[2:]
    return text


def _format_nil(value: None, verbose: bool) -> str:
    return "nil"


def _format_bool(value: bool, verbose: bool) -> str:
    return "true" if value else "false"


def _format_string(value: str, verbose: bool) -> str:
    return quote_string(value)


# =============================================================================
# Datatypes
# =============================================================================


def _call(constructor: str, args: list[str], verbose: bool) -> str:
    return f"{constructor}({(', ' if verbose else ',').join(args)})"


def _numbers(values, verbose: bool) -> list[str]:
    return [format_number(v, verbose) for v in values]


def _format_vector2(value: Vector2, verbose: bool) -> str:
    return _call("Vector2.new", _numbers((value.x, value.y), verbose), verbose)


def _format_vector3(value: Vector3, verbose: bool) -> str:
    return _call("Vector3.new", _numbers((value.x, value.y, value.z), verbose), verbose)


def _format_color3(value: Color3, verbose: bool) -> str:
    return _call("Color3.new", _numbers((value.r, value.g, value.b), verbose), verbose)


def _format_udim(value: UDim, verbose: bool) -> str:
    return _call("UDim.new", _numbers((value.scale, value.offset), verbose), verbose)


def _format_udim2(value: UDim2, verbose: bool) -> str:
    args = (value.x_scale, value.x_offset, value.y_scale, value.y_offset)
    return _call("UDim2.new", _numbers(args, verbose), verbose)


def _format_cframe(value: CFrame, verbose: bool) -> str:
    if value.rotation == IDENTITY_ROTATION:
        if value.x == value.y == value.z == 0:
            return "CFrame.new()"
        return _call("CFrame.new", _numbers((value.x, value.y, value.z), verbose), verbose)
    return _call("CFrame.new", _numbers(value.components(), verbose), verbose)


def _format_brick_color(value: BrickColor, verbose: bool) -> str:
    if verbose:
        return f"BrickColor.new({quote_string(value.name)})"
    return f"BrickColor.new{quote_string(value.name)}"


def _format_number_range(value: NumberRange, verbose: bool) -> str:
    return _call("NumberRange.new", _numbers((value.min, value.max), verbose), verbose)


def _format_enum_item(value: EnumItem, verbose: bool) -> str:
    return f"Enum.{value.enum_type}.{value.name}"


register_formatter(type(None), _format_nil)
register_formatter(bool, _format_bool)
register_formatter((int, float), format_number)
register_formatter(str, _format_string)
register_formatter(Vector2, _format_vector2)
register_formatter(Vector3, _format_vector3)
register_formatter(Color3, _format_color3)
register_formatter(UDim, _format_udim)
register_formatter(UDim2, _format_udim2)
register_formatter(CFrame, _format_cframe)
register_formatter(BrickColor, _format_brick_color)
register_formatter(NumberRange, _format_number_range)
register_formatter(EnumItem, _format_enum_item)
