"""Tests for symbol table entries and the st_info codec."""

import pytest

from elfedit import (
    SHN_ABS,
    SHN_UNDEF,
    STB_GLOBAL,
    STB_LOCAL,
    STB_WEAK,
    STT_FUNC,
    STT_NOTYPE,
    STT_OBJECT,
    ElfSectionIndex,
    ElfSymbolBinding,
    ElfSymbolTable,
    ElfSymbolTableEntry,
    ElfSymbolType,
    info_to_type_and_bind,
    type_and_bind_to_info,
)


def entry(name: bytes, bind=STB_GLOBAL, tp=STT_FUNC, value=0) -> ElfSymbolTableEntry:
    return ElfSymbolTableEntry(name, tp, bind, 0, ElfSectionIndex(1), value, 0)


class TestInfoCodec:
    """Tests for info_to_type_and_bind / type_and_bind_to_info."""

    def test_known_value(self):
        """0x12 is a global function."""
        assert info_to_type_and_bind(0x12) == (STT_FUNC, STB_GLOBAL)
        assert type_and_bind_to_info(STT_FUNC, STB_GLOBAL) == 0x12

    def test_pack_unpack_all_nibbles(self):
        """Every type and binding nibble survives packing."""
        for t in range(16):
            for b in range(16):
                tp, bind = ElfSymbolType(t), ElfSymbolBinding(b)
                assert info_to_type_and_bind(type_and_bind_to_info(tp, bind)) == (
                    tp,
                    bind,
                )

    def test_unpack_pack_all_bytes(self):
        """Every info byte survives unpacking and repacking."""
        for info in range(256):
            assert type_and_bind_to_info(*info_to_type_and_bind(info)) == info

    def test_out_of_range_truncated(self):
        """Values wider than a nibble are not rejected, only truncated."""
        assert type_and_bind_to_info(ElfSymbolType(0x1F), STB_LOCAL) == 0x1F
        assert type_and_bind_to_info(STT_NOTYPE, ElfSymbolBinding(0x1F)) == 0xF0

    def test_names(self):
        """Types and bindings render with their prefixes."""
        assert str(STT_OBJECT) == "STT_OBJECT"
        assert str(STB_WEAK) == "STB_WEAK"


class TestSymbolTableEntry:
    """Tests for ElfSymbolTableEntry."""

    def test_structural_equality(self):
        """Entries compare field by field."""
        assert entry(b"main") == entry(b"main")
        assert entry(b"main") != entry(b"other")
        assert entry(b"main", value=1) != entry(b"main", value=2)

    def test_info(self):
        """info packs binding above type."""
        assert entry(b"x", bind=STB_WEAK, tp=STT_OBJECT).info == 0x21

    def test_name_is_raw_bytes(self):
        """Names with no valid text encoding are kept as-is."""
        e = entry(b"\xff\xfe")
        assert e.name == b"\xff\xfe"


class TestSymbolTable:
    """Tests for ElfSymbolTable."""

    def test_local_count_exceeds_entries(self):
        """More locals than entries is rejected."""
        with pytest.raises(ValueError, match="exceeds"):
            ElfSymbolTable(index=3, entries=(entry(b"a"),), local_entries=2)

    def test_local_count_equal_to_entries(self):
        """A table of only locals has no globals."""
        table = ElfSymbolTable(index=3, entries=(entry(b"a", bind=STB_LOCAL),), local_entries=1)
        assert table.global_symbols == ()

    def test_list_entries_become_tuple(self):
        """List entries are stored as a tuple."""
        table = ElfSymbolTable(index=3, entries=[entry(b"a")], local_entries=0)
        assert isinstance(table.entries, tuple)

    def test_local_global_split(self):
        """local_entries splits the table."""
        null = ElfSymbolTableEntry(b"", STT_NOTYPE, STB_LOCAL, 0, SHN_UNDEF, 0, 0)
        file_ = ElfSymbolTableEntry(b"a.c", STT_NOTYPE, STB_LOCAL, 0, SHN_ABS, 0, 0)
        main = entry(b"main")
        table = ElfSymbolTable(index=3, entries=(null, file_, main), local_entries=2)
        assert table.local_symbols == (null, file_)
        assert table.global_symbols == (main,)

    def test_from_entries_orders_locals_first(self):
        """Locals move ahead of globals; relative order is preserved."""
        g1 = entry(b"g1")
        l1 = entry(b"l1", bind=STB_LOCAL)
        g2 = entry(b"g2", bind=STB_WEAK)
        l2 = entry(b"l2", bind=STB_LOCAL)
        table = ElfSymbolTable.from_entries(7, [g1, l1, g2, l2])
        assert table.index == 7
        assert table.entries == (l1, l2, g1, g2)
        assert table.local_entries == 2

    def test_find(self):
        """find() looks up entries by name."""
        table = ElfSymbolTable.from_entries(3, [entry(b"a"), entry(b"b")])
        assert table.find(b"b") == entry(b"b")
        assert table.find(b"c") is None
