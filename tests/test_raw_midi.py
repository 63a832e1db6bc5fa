import pytest

from midipattern.raw_midi import (
    BitPattern,
    FixedBit,
    FixedByte,
    Fraction,
    ParseRawMidiPatternError,
    RawMidiPattern,
    SourceContext,
    VariableBit,
    VariableByte,
)


def test_one_variable_nibble():
    pattern = RawMidiPattern.parse("F0 [0000 dcba] F7")
    assert pattern.to_bytes(1.0) == bytes([0xF0, 0x0F, 0xF7])
    assert pattern.match_and_capture([0xF0, 0x0F, 0xF7]) == Fraction(15, 15)
    assert pattern.to_bytes(0.0) == bytes([0xF0, 0x00, 0xF7])
    assert pattern.match_and_capture([0xF0, 0x00, 0xF7]) == Fraction(0, 15)
    assert pattern.to_bytes(0.5) == bytes([0xF0, 0x08, 0xF7])
    assert pattern.match_and_capture([0xF0, 0x08, 0xF7]) == Fraction(8, 15)
    assert str(pattern) == "F0 [0000 dcba] F7"
    assert pattern.match_and_capture([0xF1, 0x0F, 0xF7]) is None


def test_one_variable_nibble_no_spaces():
    pattern = RawMidiPattern.parse("F0[0000dcba]F7")
    assert pattern.to_bytes(1.0) == bytes([0xF0, 0x0F, 0xF7])
    assert pattern.to_bytes(0.0) == bytes([0xF0, 0x00, 0xF7])
    assert pattern.to_bytes(0.5) == bytes([0xF0, 0x08, 0xF7])
    assert str(pattern) == "F0 [0000 dcba] F7"


def test_one_variable_nibble_variation():
    pattern = RawMidiPattern.parse("F0[1111dcba]F7")
    assert pattern.to_bytes(1.0) == bytes([0xF0, 0xFF, 0xF7])
    assert pattern.match_and_capture([0xF0, 0xFF, 0xF7]) == Fraction(15, 15)
    assert pattern.to_bytes(0.0) == bytes([0xF0, 0xF0, 0xF7])
    assert pattern.match_and_capture([0xF0, 0xF0, 0xF7]) == Fraction(0, 15)
    assert pattern.to_bytes(0.5) == bytes([0xF0, 0xF8, 0xF7])
    assert pattern.match_and_capture([0xF0, 0xF8, 0xF7]) == Fraction(8, 15)
    assert str(pattern) == "F0 [1111 dcba] F7"


def test_wrong_variable_pattern():
    with pytest.raises(ParseRawMidiPatternError):
        RawMidiPattern.parse("F0[0000dcbaa]F7")


@pytest.mark.parametrize("text", ["F0 XY", "F0 [0000 dcbq]", "F0 [0000"])
def test_invalid_input_is_rejected(text):
    with pytest.raises(ParseRawMidiPatternError):
        RawMidiPattern.parse(text)


def test_correct_resolution_1():
    assert RawMidiPattern.parse("B0 00 [0nml kjih]").resolution == 14


def test_correct_resolution_2():
    assert RawMidiPattern.parse("B0 00 [0gfe dcba]").resolution == 7


def test_fixed_pattern():
    pattern = RawMidiPattern.parse("B0 00 F7")
    assert pattern.resolution == 0
    assert pattern.max_discrete_value == 0
    assert pattern.match_and_capture([0xF0, 0xF8, 0xF7]) is None
    assert pattern.match_and_capture([0xB0, 0x00, 0xF7]) == Fraction(0, 0)


def test_real_world_fixed_pattern():
    pattern = RawMidiPattern.parse("F0 0 20 6B 7F 42 02 00 0 2F 7F F7")
    assert pattern.resolution == 0
    assert pattern.max_discrete_value == 0
    assert pattern.match_and_capture([0xF0, 0xF8, 0xF7]) is None
    assert (
        pattern.match_and_capture(
            [0xF0, 0x0, 0x20, 0x6B, 0x7F, 0x42, 0x2, 0x0, 0x0, 0x2F, 0x7F, 0xF6]
        )
        is None
    )
    assert pattern.match_and_capture(
        [0xF0, 0x0, 0x20, 0x6B, 0x7F, 0x42, 0x2, 0x0, 0x0, 0x2F, 0x7F, 0xF7]
    ) == Fraction(0, 0)


def test_discrete_value_is_clamped():
    pattern = RawMidiPattern.parse("F0 [0000 dcba] F7")
    assert pattern.to_bytes(Fraction(3, 100)) == bytes([0xF0, 0x03, 0xF7])
    assert pattern.to_bytes(Fraction(99, 100)) == bytes([0xF0, 0x0F, 0xF7])


def test_continuous_value_out_of_range():
    pattern = RawMidiPattern.parse("F0 [0000 dcba] F7")
    with pytest.raises(ValueError):
        pattern.to_bytes(1.5)


def test_fourteen_bit_round_trip():
    pattern = RawMidiPattern.parse("B0 [0gfe dcba] [0nml kjih]")
    assert pattern.max_discrete_value == 16383
    data = pattern.to_bytes(Fraction(12345, 16383))
    assert pattern.match_and_capture(data) == Fraction(12345, 16383)


def test_variable_range_and_pattern_bytes():
    pattern = RawMidiPattern.parse("F0 [0000 0000] [0000 dcba] 01 [000a 0000] F7")
    assert pattern.variable_range() == range(2, 5)
    assert pattern.to_pattern_bytes() == [0xF0, 0x00, None, 0x01, None, 0xF7]
    assert RawMidiPattern.parse("F0 F7").variable_range() is None


def test_step_size():
    assert RawMidiPattern.parse("[0000 dcba]").step_size == pytest.approx(1 / 15)
    assert RawMidiPattern.parse("F0").step_size is None


def test_fixed_from_bytes():
    pattern = RawMidiPattern.fixed_from_bytes(b"\x90\x40\x7f")
    assert str(pattern) == "90 40 7F"
    assert pattern.to_bytes(0.3) == b"\x90\x40\x7f"
    assert pattern.resolution == 0


def test_entry_behaviour():
    fixed = FixedByte(0x42)
    assert fixed.is_fixed()
    assert fixed.match_and_capture(0x42, 5) == 5
    assert fixed.match_and_capture(0x43, 5) is None
    constant = VariableByte(BitPattern((FixedBit(True),) + (FixedBit(False),) * 7))
    assert constant.byte_if_fixed() == 0x80
    assert constant.max_variable_bit_index() is None
    variable = VariableByte(BitPattern((VariableBit(3),) + (FixedBit(False),) * 7))
    assert not variable.is_fixed()
    assert variable.max_variable_bit_index() == 3
    assert variable.to_byte(0b1000) == 0x80
    assert variable.match_and_capture(0x80, 0) == 0b1000


def test_bit_pattern_too_long():
    with pytest.raises(ParseRawMidiPatternError):
        BitPattern((FixedBit(False),) * 9)


def test_source_context_holds_input():
    assert SourceContext(additional_script_input=7).additional_script_input == 7
    assert SourceContext().additional_script_input is None