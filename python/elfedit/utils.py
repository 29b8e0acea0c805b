"""
Small helpers shared across the ELF model.

Range arithmetic over byte buffers, hex formatting, and the flag-set
renderer used by the flag types.
"""

from typing import Iterable, Iterator, Sequence

# A (start, count) half-open interval.
Range = tuple[int, int]


def has_permissions(p, req) -> bool:
    """Return True if every bit set in req is also set in p.

    Works for plain ints and for any FlagSet.
    """
    return (p & req) == req


# =============================================================================
# Range
# =============================================================================


def in_range(x: int, rng: Range) -> bool:
    """Check if x falls in the half-open interval [start, start + count).

    Values below start are outside the range (no unsigned wraparound).
    """
    start, count = rng
    return start <= x and (x - start) < count


def slice_bytes(rng: Range, data: bytes | bytearray | memoryview) -> bytes:
    """Return at most count bytes of data beginning at start.

    Out-of-bounds ranges are clamped; a short buffer yields fewer bytes.
    """
    start, count = rng
    if count <= 0 or start >= len(data):
        return b""
    start = max(start, 0)
    return bytes(data[start : start + count])


def slice_chunks(rng: Range, chunks: Iterable[bytes]) -> Iterator[bytes]:
    """Lazily slice a stream of byte chunks.

    Consumes chunks only until count bytes past start have been produced.
    """
    start, count = rng
    if count <= 0:
        return
    pos = 0
    end = max(start, 0) + count
    for chunk in chunks:
        chunk_end = pos + len(chunk)
        if chunk_end > start:
            lo = max(start - pos, 0)
            hi = min(end - pos, len(chunk))
            if hi > lo:
                yield bytes(chunk[lo:hi])
        pos = chunk_end
        if pos >= end:
            return


# =============================================================================
# Formatting
# =============================================================================


def pp_hex(value: int, bits: int | None = None) -> str:
    """Format a non-negative integer as lowercase hex with a 0x prefix.

    When bits is given and is a multiple of 4, the digits are zero-padded
    to the full width.

    Raises:
        ValueError: If value is negative
    """
    if value < 0:
        raise ValueError(f"pp_hex given negative value: {value}")
    digits = f"{value:x}"
    if bits is not None and bits % 4 == 0:
        digits = digits.rjust(bits // 4, "0")
    return "0x" + digits




def show_flags(none_name: str, names: Sequence[str], value: int) -> str:
    """Render a bitmask as its named bits.

    Bit i of value is named names[i]; an empty name marks an unassigned bit.
    Returns none_name for zero, and appends any bits without a name as a
    hex remainder.
    """
    parts = []
    named_mask = 0
    for i, name in enumerate(names):
        if not name:
            continue
        named_mask |= 1 << i
        if value & (1 << i):
            parts.append(name)
    unknown = value & ~named_mask
    if unknown:
        parts.append(f"0x{unknown:x}")
    if not parts:
        return none_name
    return " | ".join(parts)
