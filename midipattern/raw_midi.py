"""Raw MIDI byte patterns with optional variable bits.

A pattern is written as a space-separated list of hexadecimal bytes, where a
byte may be replaced by a bracketed bit pattern such as ``[0000 dcba]``.
Letters ``a`` to ``p`` stand for variable bits 0 to 15 (``a`` being the least
significant bit of the captured value); ``0`` and ``1`` are fixed bits.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Iterator, Union

__all__ = [
    "ParseRawMidiPatternError",
    "Fraction",
    "SourceContext",
    "FixedBit",
    "VariableBit",
    "BitPattern",
    "FixedByte",
    "VariableByte",
    "RawMidiPattern",
]

_MAX_VARIABLE_BIT_INDEX = 15


class ParseRawMidiPatternError(ValueError):
    """Raised when a raw MIDI pattern string cannot be parsed."""


@dataclass(frozen=True)
class Fraction:
    """A discrete value together with the maximum it can reach."""

    actual: int
    max_val: int

    def __post_init__(self) -> None:
        if self.actual < 0 or self.max_val < 0:
            raise ValueError("fraction components must not be negative")


@dataclass
class SourceContext:
    """Context for source-related functions."""

    additional_script_input: Any = None


@dataclass(frozen=True)
class FixedBit:
    """A bit whose value is fixed."""

    value: bool = False

    def __str__(self) -> str:
        return "1" if self.value else "0"


@dataclass(frozen=True)
class VariableBit:
    """A bit taken from the variable value; index 0 is the least significant bit."""

    index: int

    def __post_init__(self) -> None:
        if not 0 <= self.index <= _MAX_VARIABLE_BIT_INDEX:
            raise ValueError(f"variable bit index out of range: {self.index}")

    def __str__(self) -> str:
        return chr(ord("a") + self.index)


BitPatternEntry = Union[FixedBit, VariableBit]


@dataclass(frozen=True)
class BitPattern:
    """Eight bit entries, from most significant to least significant bit."""

    entries: tuple[BitPatternEntry, ...] = field(
        default_factory=lambda: (FixedBit(False),) * 8
    )

    def __post_init__(self) -> None:
        entries = tuple(self.entries)
        if len(entries) > 8:
            raise ParseRawMidiPatternError("too many bits in bit pattern")
        entries += (FixedBit(False),) * (8 - len(entries))
        object.__setattr__(self, "entries", entries)

    def contains_variable_portions(self) -> bool:
        """Whether any bit is variable."""
        return any(isinstance(e, VariableBit) for e in self.entries)

    def max_variable_bit_index(self) -> int | None:
        """Highest variable bit index, or None if all bits are fixed."""
        indexes = [e.index for e in self.entries if isinstance(e, VariableBit)]
        return max(indexes, default=None)

    def to_byte(self, discrete_value: int) -> int:
        """Build the concrete byte for the given discrete value."""
        result = 0
        for position, entry in enumerate(self.entries):
            if isinstance(entry, FixedBit):
                bit = entry.value
            else:
                bit = bool((discrete_value >> entry.index) & 1)
            if bit:
                result |= 1 << (7 - position)
        return result

    def match_and_capture(self, actual_byte: int, current_value: int) -> int | None:
        """Match a byte, returning the value with captured bits set, or None."""
        new_value = current_value
        for position, entry in enumerate(self.entries):
            actual_bit = bool((actual_byte >> (7 - position)) & 1)
            if isinstance(entry, FixedBit):
                if entry.value != actual_bit:
                    return None
            elif actual_bit:
                new_value |= 1 << entry.index
        return new_value

    def __str__(self) -> str:
        head = "".join(str(e) for e in self.entries[:4])
        tail = "".join(str(e) for e in self.entries[4:])
        return f"{head} {tail}"


@dataclass(frozen=True)
class FixedByte:
    """A pattern entry that is always the same byte."""

    byte: int

    def __post_init__(self) -> None:
        if not 0 <= self.byte <= 0xFF:
            raise ValueError(f"byte out of range: {self.byte}")

    def _as_bit_pattern(self) -> BitPattern:
        return BitPattern(
            tuple(FixedBit(bool((self.byte >> (7 - i)) & 1)) for i in range(8))
        )

    def byte_if_fixed(self) -> int | None:
        return self.byte

    def is_fixed(self) -> bool:
        return True

    def max_variable_bit_index(self) -> int | None:
        """Highest variable bit index of this byte's bits (always None)."""
        return self._as_bit_pattern().max_variable_bit_index()

    def to_byte(self, discrete_value: int) -> int:
        return self.byte

    def match_and_capture(self, actual_byte: int, current_value: int) -> int | None:
        return current_value if actual_byte == self.byte else None

    def __str__(self) -> str:
        return f"{self.byte:02X}"


@dataclass(frozen=True)
class VariableByte:
    """A pattern entry described bit by bit, possibly with variable bits."""

    pattern: BitPattern

    def byte_if_fixed(self) -> int | None:
        if self.pattern.contains_variable_portions():
            return None
        return self.pattern.to_byte(0)

    def is_fixed(self) -> bool:
        return self.byte_if_fixed() is not None

    def max_variable_bit_index(self) -> int | None:
        return self.pattern.max_variable_bit_index()

    def to_byte(self, discrete_value: int) -> int:
        return self.pattern.to_byte(discrete_value)

    def match_and_capture(self, actual_byte: int, current_value: int) -> int | None:
        return self.pattern.match_and_capture(actual_byte, current_value)

    def __str__(self) -> str:
        return f"[{self.pattern}]"


PatternEntry = Union[FixedByte, VariableByte]

_TOKEN_RE = re.compile(
    r"(?P<skip>[ \t\n\f]+)"
    r"|(?P<bits>\[[01a-p ]*\])"
    r"|(?P<byte>[0-9a-fA-F][0-9a-fA-F]?)"
)


def _parse_bit_pattern(text: str) -> BitPattern:
    entries: list[BitPatternEntry] = []
    for char in text:
        if char == "0":
            entry: BitPatternEntry = FixedBit(False)
        elif char == "1":
            entry = FixedBit(True)
        elif "a" <= char <= "p":
            entry = VariableBit(ord(char) - ord("a"))
        else:
            continue
        if len(entries) >= 8:
            raise ParseRawMidiPatternError("too many bits in bit pattern")
        entries.append(entry)
    return BitPattern(tuple(entries))


def _tokenize(text: str) -> Iterator[PatternEntry]:
    position = 0
    while position < len(text):
        match = _TOKEN_RE.match(text, position)
        if match is None:
            raise ParseRawMidiPatternError("couldn't parse raw MIDI pattern")
        position = match.end()
        if match.lastgroup == "bits":
            try:
                yield VariableByte(_parse_bit_pattern(match.group()))
            except ParseRawMidiPatternError as exc:
                raise ParseRawMidiPatternError(
                    "couldn't parse raw MIDI pattern"
                ) from exc
        elif match.lastgroup == "byte":
            yield FixedByte(int(match.group(), 16))


@dataclass(frozen=True)
class RawMidiPattern:
    """A sequence of fixed and potentially variable MIDI bytes."""

    entries: tuple[PatternEntry, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", tuple(self.entries))

    @classmethod
    def fixed_from_bytes(cls, data: bytes | bytearray | list[int]) -> RawMidiPattern:
        """Create a pattern consisting only of the given fixed bytes."""
        return cls(tuple(FixedByte(b) for b in data))

    @classmethod
    def parse(cls, text: str) -> RawMidiPattern:
        """Parse a pattern such as ``"F0 [0000 dcba] F7"``."""
        return cls(tuple(_tokenize(text)))

    def variable_range(self) -> range | None:
        """Index range spanning the first to the last variable entry."""
        variable = [i for i, e in enumerate(self.entries) if not e.is_fixed()]
        if not variable:
            return None
        return range(variable[0], variable[-1] + 1)

    def to_pattern_bytes(self) -> list[int | None]:
        """Fixed bytes as integers, variable bytes as None."""
        return [e.byte_if_fixed() for e in self.entries]

    @property
    def resolution(self) -> int:
        """Resolution in bits (at most 16); 0 if there are no variable bits."""
        indexes = [
            i for i in (e.max_variable_bit_index() for e in self.entries) if i is not None
        ]
        return max(indexes) + 1 if indexes else 0

    @property
    def max_discrete_value(self) -> int:
        """Largest representable discrete value; 0 if there are no variable bits."""
        return 2**self.resolution - 1

    @property
    def step_size(self) -> float | None:
        """Smallest unit-interval step, or None if there are no variable bits."""
        max_value = self.max_discrete_value
        if max_value == 0:
            return None
        return min(1.0, max(0.0, 1.0 / max_value))

    def match_and_capture(self, data: bytes | bytearray | list[int]) -> Fraction | None:
        """Match concrete bytes and capture the variable value.

        A match against a pattern without variable bits yields ``Fraction(0, 0)``.
        """
        data = list(data)
        if len(data) != len(self.entries):
            return None
        value = 0
        for entry, actual in zip(self.entries, data):
            captured = entry.match_and_capture(actual, value)
            if captured is None:
                return None
            value = captured
        return Fraction(value, self.max_discrete_value)

    def _discrete_value(self, value: float | Fraction) -> int:
        max_value = self.max_discrete_value
        if isinstance(value, Fraction):
            return min(value.actual, max_value)
        unit = float(value)
        if not 0.0 <= unit <= 1.0:
            raise ValueError(f"continuous value must be within 0.0 and 1.0: {unit}")
        return math.floor(unit * max_value + 0.5)

    def byte_iter(self, value: float | Fraction) -> Iterator[int]:
        """Yield concrete bytes for a unit value (float) or a discrete Fraction."""
        discrete = self._discrete_value(value)
        return (e.to_byte(discrete) for e in self.entries)

    def to_bytes(self, value: float | Fraction) -> bytes:
        """Concrete bytes for a unit value (float) or a discrete Fraction."""
        return bytes(self.byte_iter(value))

    def __str__(self) -> str:
        return " ".join(str(e) for e in self.entries)