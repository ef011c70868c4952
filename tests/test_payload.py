"""Tests for the record <-> wire object mapping."""

import pytest

from colorbytecode.errors import InvalidPayloadError
from colorbytecode.payload import (
    DEFAULT_KEY,
    ColorByteCodeData,
    EncodeOptions,
    RectArea,
    from_wire,
    to_wire,
)


def _record(hash_key=DEFAULT_KEY) -> ColorByteCodeData:
    return ColorByteCodeData(
        encode_options=EncodeOptions(
            grid_size=16,
            is_swap=True,
            is_rotate=False,
            is_nega=True,
            hash_key=hash_key,
        ),
        areas=[RectArea(x=0, y=0, w=640, h=480), RectArea(x=32, y=48, w=128, h=96)],
        size=(640, 480, 0),
    )


def _wire() -> dict:
    return {
        "s": [640, 480, 0],
        "o": {"g": 16, "s": 1, "n": 0, "k": 0, "r": 1},
        "c": [{"x": 1, "y": 2, "w": 3, "h": 4}],
    }


class TestToWire:
    def test_shape(self):
        wire = to_wire(_record())
        assert set(wire) == {"s", "o", "c"}
        assert set(wire["o"]) == {"g", "s", "n", "k", "r"}

    def test_size_is_list(self):
        assert to_wire(_record())["s"] == [640, 480, 0]

    def test_flags_are_ints(self):
        options = to_wire(_record())["o"]
        assert options == {"g": 16, "s": 1, "n": 1, "k": 1, "r": 0}

    def test_key_presence_only(self):
        assert to_wire(_record(hash_key=None))["o"]["k"] == 0
        assert to_wire(_record(hash_key="secret"))["o"]["k"] == 1

    def test_areas(self):
        areas = to_wire(_record())["c"]
        assert areas[1] == {"x": 32, "y": 48, "w": 128, "h": 96}


class TestFromWire:
    def test_roundtrip(self):
        record = _record()
        assert from_wire(to_wire(record)) == record

    def test_roundtrip_without_key(self):
        record = _record(hash_key=None)
        assert from_wire(to_wire(record)) == record

    def test_key_flag_restores_default_key(self):
        wire = _wire()
        wire["o"]["k"] = 1
        assert from_wire(wire).encode_options.hash_key == DEFAULT_KEY

    def test_flags_become_bools(self):
        options = from_wire(_wire()).encode_options
        assert options.is_swap is True
        assert options.is_nega is False
        assert options.is_rotate is True
        assert options.hash_key is None

    def test_size_becomes_tuple(self):
        assert from_wire(_wire()).size == (640, 480, 0)

    def test_empty_areas(self):
        wire = _wire()
        wire["c"] = []
        with pytest.raises(InvalidPayloadError, match="no areas"):
            from_wire(wire)

    def test_missing_areas(self):
        wire = _wire()
        del wire["c"]
        with pytest.raises(InvalidPayloadError):
            from_wire(wire)

    def test_missing_options(self):
        wire = _wire()
        del wire["o"]
        with pytest.raises(InvalidPayloadError, match="missing options"):
            from_wire(wire)

    def test_size_wrong_length(self):
        wire = _wire()
        wire["s"] = [640, 480]
        with pytest.raises(InvalidPayloadError, match="size"):
            from_wire(wire)

    def test_missing_option_field(self):
        wire = _wire()
        del wire["o"]["g"]
        with pytest.raises(InvalidPayloadError):
            from_wire(wire)

    def test_area_missing_field(self):
        wire = _wire()
        wire["c"] = [{"x": 1, "y": 2}]
        with pytest.raises(InvalidPayloadError, match="Area"):
            from_wire(wire)

    def test_not_a_map(self):
        with pytest.raises(InvalidPayloadError):
            from_wire([1, 2, 3])
