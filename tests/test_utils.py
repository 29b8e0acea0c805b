"""Tests for range, formatting and flag helpers."""

import pytest

from elfedit import PF_NONE, PF_R, PF_W, PF_X
from elfedit.utils import (
    has_permissions,
    in_range,
    pp_hex,
    show_flags,
    slice_bytes,
    slice_chunks,
)


class TestInRange:
    """Tests for in_range()."""

    def test_inside(self):
        """[3, 7) contains 5."""
        assert in_range(5, (3, 4)) is True

    def test_at_start(self):
        """Start is inclusive."""
        assert in_range(3, (3, 4)) is True

    def test_last_element(self):
        """start + count - 1 is the last member."""
        assert in_range(6, (3, 4)) is True

    def test_at_end(self):
        """End is exclusive."""
        assert in_range(7, (3, 4)) is False

    def test_below_start(self):
        """Values below start are outside (no unsigned wraparound)."""
        assert in_range(2, (3, 4)) is False
        assert in_range(0, (0xFFFFFFFF, 1)) is False

    def test_empty_range(self):
        """A zero count contains nothing."""
        assert in_range(3, (3, 0)) is False


class TestSliceBytes:
    """Tests for slice_bytes()."""

    def test_slice_inside(self):
        """A range inside the data is returned exactly."""
        assert slice_bytes((2, 3), b"abcdef") == b"cde"

    def test_clamped_at_end(self):
        """Short reads return fewer bytes rather than failing."""
        assert slice_bytes((4, 10), b"abcdef") == b"ef"

    def test_start_past_end(self):
        """A start past the end gives no bytes."""
        assert slice_bytes((10, 2), b"abcdef") == b""

    def test_zero_count(self):
        """A zero count gives no bytes."""
        assert slice_bytes((0, 0), b"abcdef") == b""

    def test_bytearray_input(self):
        """Mutable buffers produce an immutable copy."""
        result = slice_bytes((1, 2), bytearray(b"xyz"))
        assert result == b"yz"
        assert isinstance(result, bytes)


class TestSliceChunks:
    """Tests for slice_chunks()."""

    def test_across_chunks(self):
        """A range spanning chunk boundaries is joined correctly."""
        chunks = [b"ab", b"cd", b"efgh"]
        assert b"".join(slice_chunks((2, 5), chunks)) == b"cdefg"

    @pytest.mark.parametrize("rng", [(0, 3), (1, 4), (3, 100), (9, 1), (20, 5), (0, 0)])
    def test_matches_slice_bytes(self, rng):
        """Chunked slicing agrees with slicing the concatenation."""
        chunks = [b"abc", b"", b"defg", b"hij"]
        assert b"".join(slice_chunks(rng, chunks)) == slice_bytes(rng, b"".join(chunks))

    def test_lazy(self):
        """Chunks past the end of the range are never pulled."""

        def chunks():
            yield b"abcd"
            raise AssertionError("consumed past the requested range")

        assert b"".join(slice_chunks((1, 3), chunks())) == b"bcd"


class TestPpHex:
    """Tests for pp_hex()."""

    def test_full_width_byte(self):
        """A full byte needs no padding."""
        assert pp_hex(255, 8) == "0xff"

    def test_zero_padded(self):
        """Padding reaches the full bit width."""
        assert pp_hex(15, 8) == "0x0f"
        assert pp_hex(0x1000, 32) == "0x00001000"
        assert pp_hex(0x1000, 64) == "0x0000000000001000"

    def test_no_width(self):
        """Without a width there is no padding."""
        assert pp_hex(0x1F) == "0x1f"
        assert pp_hex(0) == "0x0"

    def test_width_not_multiple_of_four(self):
        """Widths that do not divide into nibbles are not padded."""
        assert pp_hex(5, 6) == "0x5"

    def test_wider_than_width(self):
        """Values are never truncated."""
        assert pp_hex(0x1234, 8) == "0x1234"

    def test_negative_raises(self):
        """Negative values are a caller error."""
        with pytest.raises(ValueError, match="negative"):
            pp_hex(-1)


class TestHasPermissions:
    """Tests for has_permissions()."""

    def test_plain_ints(self):
        """Plain integers are accepted."""
        assert has_permissions(6, 4) is True
        assert has_permissions(4, 2) is False

    def test_segment_flags(self):
        """Segment flag sets are accepted."""
        assert has_permissions(PF_R | PF_W, PF_R) is True
        assert has_permissions(PF_R, PF_W) is False
        assert has_permissions(PF_R | PF_W | PF_X, PF_R | PF_X) is True

    def test_empty_requirement(self):
        """Every value satisfies the empty requirement."""
        assert has_permissions(PF_NONE, PF_NONE) is True
        assert has_permissions(PF_R, PF_NONE) is True

    def test_mixed_flag_and_int(self):
        """A flag set can be checked against a plain int."""
        assert has_permissions(PF_R | PF_X, 0x1) is True


class TestShowFlags:
    """Tests for show_flags()."""

    def test_none(self):
        """An empty set renders the none name."""
        assert show_flags("none", ("a", "b"), 0) == "none"

    def test_named_bits(self):
        """Named bits are joined with a separator."""
        assert show_flags("none", ("a", "b"), 3) == "a | b"

    def test_unknown_bits(self):
        """Bits without a name are appended as hex."""
        assert show_flags("none", ("a", "b"), 0x10) == "0x10"
        assert show_flags("none", ("a", "b", "c"), 0x9) == "a | 0x8"

    def test_unassigned_bit(self):
        """An empty name leaves that bit in the hex remainder."""
        assert show_flags("none", ("a", "", "c"), 0x6) == "c | 0x2"
