"""Raw MIDI byte patterns with variable bits: parse, render, match and capture values."""

__version__ = "0.1.0"
__all__ = ["raw_midi"]