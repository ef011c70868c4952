"""Domain record carried by a color byte code.

The record describes how an image was transformed (grid size, swap,
rotate, negate, key presence), which rectangular areas were affected,
and the image size. On the wire it becomes a compact object with
single-letter keys:

    {
        "s": [width, height, depth],
        "o": {"g": grid_size, "s": swap, "n": nega, "k": has_key, "r": rotate},
        "c": [{"x": .., "y": .., "w": .., "h": ..}, ...],
    }

Flags are sent as 0/1. Only the presence of a hash key is sent; decoding
restores DEFAULT_KEY when the flag is set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .errors import InvalidPayloadError

DEFAULT_KEY = "colorbytecode"

SIZE_FIELDS = 3


@dataclass
class RectArea:
    """A rectangular area of the image, in pixels."""

    x: int
    y: int
    w: int
    h: int

    def to_wire(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}

    @classmethod
    def from_wire(cls, data: Any) -> RectArea:
        if not isinstance(data, dict):
            raise InvalidPayloadError(f"Area must be a map, got {type(data).__name__}")
        try:
            return cls(x=data["x"], y=data["y"], w=data["w"], h=data["h"])
        except KeyError as e:
            raise InvalidPayloadError(f"Area is missing field {e}") from None


@dataclass
class EncodeOptions:
    """Transform options applied to the image.

    Attributes:
        grid_size: Edge length of the transform grid cells.
        is_swap: Cells were shuffled.
        is_rotate: Cells were rotated.
        is_nega: Colors were inverted.
        hash_key: Key used for shuffling, or None if no key was used.
    """

    grid_size: int
    is_swap: bool = False
    is_rotate: bool = False
    is_nega: bool = False
    hash_key: str | None = None


@dataclass
class ColorByteCodeData:
    """Everything a color byte code carries.

    Attributes:
        encode_options: Transform options.
        areas: Affected rectangular areas (at least one).
        size: (width, height, depth) of the source image.
    """

    encode_options: EncodeOptions
    areas: list[RectArea] = field(default_factory=list)
    size: tuple[int, int, int] = (0, 0, 0)


def to_wire(data: ColorByteCodeData) -> dict[str, Any]:
    """Convert a record to the compact wire object."""
    options = data.encode_options
    return {
        "s": list(data.size),
        "o": {
            "k": 1 if options.hash_key is not None else 0,
            "s": 1 if options.is_swap else 0,
            "n": 1 if options.is_nega else 0,
            "g": options.grid_size,
            "r": 1 if options.is_rotate else 0,
        },
        "c": [area.to_wire() for area in data.areas],
    }


def from_wire(obj: Any) -> ColorByteCodeData:
    """Convert a decoded wire object back to a record.

    Raises:
        InvalidPayloadError: If the option map is missing, the area list is
            empty, or the size is not a 3-element list.
    """
    if not isinstance(obj, dict):
        raise InvalidPayloadError("Invalid ColorByteCode type: payload is not a map")

    options = obj.get("o")
    areas = obj.get("c")
    size = obj.get("s")

    if not isinstance(options, dict):
        raise InvalidPayloadError("Invalid ColorByteCode type: missing options")
    if not isinstance(areas, list) or len(areas) == 0:
        raise InvalidPayloadError("Invalid ColorByteCode type: no areas")
    if not isinstance(size, (list, tuple)) or len(size) != SIZE_FIELDS:
        raise InvalidPayloadError("Invalid ColorByteCode type: size must have 3 values")

    try:
        encode_options = EncodeOptions(
            grid_size=options["g"],
            is_swap=bool(options["s"]),
            is_rotate=bool(options["r"]),
            is_nega=bool(options["n"]),
            hash_key=DEFAULT_KEY if options["k"] else None,
        )
    except KeyError as e:
        raise InvalidPayloadError(f"Invalid ColorByteCode type: option {e} missing") from None

    return ColorByteCodeData(
        encode_options=encode_options,
        areas=[RectArea.from_wire(a) for a in areas],
        size=(size[0], size[1], size[2]),
    )
