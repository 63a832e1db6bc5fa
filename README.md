# midipattern

Describe raw MIDI messages as byte patterns in which some bits carry a
value. A pattern can turn a value into concrete bytes. It can also check
incoming bytes against itself and recover the value they carry.

## Installation

```
pip install midipattern
```

## Pattern syntax

A pattern is a sequence of entries. Whitespace between entries is optional.

- A fixed byte is one or two hex digits, e.g. `F0`, `7f`, `0`.
- A bit pattern is written in square brackets. It holds up to eight bit
  symbols, from the most significant bit to the least significant one.
  Missing trailing bits are fixed `0`.
  - `0` and `1` are fixed bits.
  - `a` to `p` are variable bits. `a` is bit 0 (the least significant
    bit) of the value, `b` is bit 1, and so on up to `p` (bit 15).
  - Spaces inside the brackets are ignored, so `[0000 dcba]` and `[0000dcba]`
    mean the same thing.

The resolution of a pattern is the highest variable bit index plus one.
A pattern therefore carries values of at most 16 bits.

## Usage

```python
from midipattern.raw_midi import Fraction, RawMidiPattern

pattern = RawMidiPattern.parse("F0 [0000 dcba] F7")

pattern.resolution          # 4
pattern.max_discrete_value  # 15
pattern.step_size           # 1/15
str(pattern)                # "F0 [0000 dcba] F7"

# Render bytes from a continuous value between 0.0 and 1.0 ...
pattern.to_bytes(1.0)       # b"\xf0\x0f\xf7"
pattern.to_bytes(0.5)       # b"\xf0\x08\xf7"

# ... or from a discrete value, which is clamped to the maximum.
pattern.to_bytes(Fraction(3, 15))  # b"\xf0\x03\xf7"

# Match incoming bytes and capture the value they carry.
pattern.match_and_capture(b"\xf0\x08\xf7")  # Fraction(actual=8, max_val=15)
pattern.match_and_capture(b"\xf1\x0f\xf7")  # None
```

A continuous value is rounded to the nearest discrete step. A value outside
0.0 to 1.0 raises `ValueError`.

A pattern without variable bits matches exactly its own bytes and captures
`Fraction(0, 0)`:

```python
fixed = RawMidiPattern.parse("B0 00 F7")
fixed.match_and_capture(b"\xb0\x00\xf7")  # Fraction(actual=0, max_val=0)
fixed.step_size                           # None
```

Invalid input raises `ParseRawMidiPatternError`, a subclass of `ValueError`.
This covers unknown characters and bit patterns with more than eight bits.

## API overview

All names live in `midipattern.raw_midi`.

- `RawMidiPattern`: an immutable sequence of entries.
  - `RawMidiPattern.parse(text)` parses the syntax above.
  - `RawMidiPattern.fixed_from_bytes(data)` builds a pattern of fixed bytes.
  - `resolution`, `max_discrete_value` and `step_size` are properties.
  - `variable_range()` returns a `range` of the entry indexes from the first
    to the last variable entry, or `None`.
  - `to_pattern_bytes()` returns each entry as its fixed byte value, or `None`
    where the entry is variable.
  - `to_bytes(value)` and `byte_iter(value)` render a float or a `Fraction`.
  - `match_and_capture(data)` returns a `Fraction` or `None`.
- `FixedByte` and `VariableByte` are the two kinds of entries. A
  `VariableByte` wraps a `BitPattern` of `FixedBit` and `VariableBit` entries.
- `Fraction(actual, max_val)` is a discrete value with its maximum.
- `SourceContext(additional_script_input)` is a plain holder for extra input
  passed alongside sources.

## What it does not do

This package only builds, renders and matches byte patterns. It does not
open MIDI ports, send or receive messages, or attach timing such as frame
offsets to the bytes it produces.

## Running the tests

```
pip install -e ".[test]"
pytest
```