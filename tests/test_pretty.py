"""Tests for the diagnostic renderer."""

import pytest

from elfedit import (
    ELFCLASS32,
    ELFCLASS64,
    PF_R,
    PF_X,
    PT_LOAD,
    PT_PHDR,
    ElfAbsoluteSize,
    ElfDataElfHeader,
    ElfDataGOT,
    ElfDataRaw,
    ElfDataSection,
    ElfDataSectionHeaders,
    ElfDataSectionNameTable,
    ElfDataSegment,
    ElfDataSegmentHeaders,
    ElfDataStrtab,
    ElfDataSymtab,
    ElfRelativeSize,
    ElfSegment,
    RenderOptions,
    pp_elf,
    pp_region,
    pp_segment,
)
from model_test_utils import make_got, make_segment, make_symtab, make_text_section


def load_segment() -> ElfSegment:
    return ElfSegment(
        type=PT_LOAD,
        flags=PF_R | PF_X,
        index=0,
        virt_addr=0x400000,
        phys_addr=0x400000,
        align=0x1000,
        mem_size=ElfAbsoluteSize(0x2000),
        data=(ElfDataElfHeader(), ElfDataRaw(b"\x01\x02")),
    )


class TestPpSegment:
    """Tests for pp_segment()."""

    def test_layout(self):
        """Scalar fields on labelled lines, then indented regions."""
        assert pp_segment(load_segment(), ELFCLASS32) == "\n".join(
            [
                "type:  PT_LOAD",
                "flags: pf_x | pf_r",
                "index: 0",
                "vaddr: 0x00400000",
                "paddr: 0x00400000",
                "align: 4096",
                "msize: absolute 8192",
                "data:",
                "  ELF header",
                "  raw bytes: 2 bytes [01 02]",
            ]
        )

    def test_addresses_use_class_width(self):
        """Addresses pad to the word width of the class."""
        text = pp_segment(load_segment(), ELFCLASS64)
        assert "vaddr: 0x0000000000400000" in text.splitlines()

    def test_relative_size(self):
        """Relative memory sizes show their offset; empty data ends the block."""
        seg = ElfSegment(PT_LOAD, PF_R, 0, 0, 0, 0, ElfRelativeSize(16))
        lines = pp_segment(seg, ELFCLASS32).splitlines()
        assert "msize: relative +16" in lines
        assert lines[-1] == "data:"

    def test_custom_indent(self):
        """Children indent by the configured width."""
        text = pp_segment(load_segment(), ELFCLASS32, RenderOptions(indent=4))
        assert text.splitlines()[-2] == "    ELF header"


class TestPpRegion:
    """Tests for pp_region()."""

    def test_markers(self):
        """Table markers render as fixed labels."""
        assert pp_region(ElfDataElfHeader(), ELFCLASS64) == "ELF header"
        assert pp_region(ElfDataSegmentHeaders(), ELFCLASS64) == "segment header table"
        assert pp_region(ElfDataSectionHeaders(), ELFCLASS64) == "section header table"
        assert (
            pp_region(ElfDataSectionNameTable(5), ELFCLASS64)
            == "section name table (section number 5)"
        )
        assert (
            pp_region(ElfDataStrtab(4), ELFCLASS64)
            == "strtab section (section number 4)"
        )

    def test_nested_segment(self):
        """Nested segments render one level deeper than their label."""
        inner = make_segment(
            0, [ElfDataSegmentHeaders()], type=PT_PHDR, vaddr=0x40, align=8
        )
        lines = pp_region(ElfDataSegment(inner), ELFCLASS32).splitlines()
        assert lines[0] == "contained segment"
        assert lines[1] == "  type:  PT_PHDR"
        assert lines[4] == "  vaddr: 0x00000040"
        assert lines[-2] == "  data:"
        assert lines[-1] == "    segment header table"

    def test_got(self):
        """GOTs show name, index, address and size."""
        text = pp_region(ElfDataGOT(make_got()), ELFCLASS64)
        assert text.startswith("global offset table: .got (section number 2)")
        assert "addr 0x0000000000601000" in text
        assert "size 24" in text

    def test_section(self):
        """Generic sections show type and flags."""
        text = pp_region(ElfDataSection(make_text_section()), ELFCLASS64)
        assert text.startswith("other section: .text (section number 1) SHT_PROGBITS")
        assert "[shf_alloc | shf_execinstr]" in text

    def test_symtab(self):
        """Symbol tables list one line per entry after a summary."""
        lines = pp_region(ElfDataSymtab(make_symtab()), ELFCLASS64).splitlines()
        assert lines[0] == "symtab section: (section number 3) 3 entries, 2 local"
        assert len(lines) == 4
        assert lines[3].endswith("STT_FUNC STB_GLOBAL 1 _start")
        assert "SHN_ABS crt1.c" in lines[2]

    def test_raw_preview_elided(self):
        """Raw data past the preview length is elided."""
        opts = RenderOptions(raw_preview_bytes=2)
        text = pp_region(ElfDataRaw(b"\x00\x01\x02\x03"), ELFCLASS64, opts)
        assert text == "raw bytes: 4 bytes [00 01 ...]"

    def test_raw_shown_in_full_by_default(self):
        """Without a preview limit every byte is rendered."""
        data = bytes(range(40))
        text = pp_region(ElfDataRaw(data), ELFCLASS64)
        assert text == f"raw bytes: 40 bytes [{data.hex(' ')}]"
        assert "..." not in text

    def test_raw_at_preview_limit(self):
        """Data exactly as long as the limit is not elided."""
        opts = RenderOptions(raw_preview_bytes=2)
        assert pp_region(ElfDataRaw(b"\x0a\x0b"), ELFCLASS64, opts) == (
            "raw bytes: 2 bytes [0a 0b]"
        )

    def test_raw_empty(self):
        """Empty raw data has no preview."""
        assert pp_region(ElfDataRaw(b""), ELFCLASS64) == "raw bytes: 0 bytes"

    def test_not_a_region(self):
        """Anything that is not a region is rejected."""
        with pytest.raises(TypeError, match="Not an ELF data region"):
            pp_region("bogus", ELFCLASS64)


class TestPpElf:
    """Tests for pp_elf()."""

    def test_header_and_regions(self, sample_elf):
        """Header fields and GNU entries precede the region list."""
        lines = pp_elf(sample_elf).splitlines()
        assert lines[0] == "class:       ELFCLASS64"
        assert "machine:     EM_X86_64" in lines
        assert "entry:       0x0000000000401000" in lines
        assert "gnu stack:   non-executable (segment 3)" in lines
        assert (
            "gnu relro:   segment 4 protects segment 2 from 0x0000000000601000 size 24"
            in lines
        )
        regions_at = lines.index("regions:")
        assert lines[regions_at + 1] == "  contained segment"
        assert lines[-1] == "  section header table"

    def test_does_not_modify(self, sample_elf):
        """Rendering leaves the model unchanged."""
        from model_test_utils import sample_executable

        pp_elf(sample_elf)
        assert sample_elf == sample_executable()

    def test_empty(self, elf64):
        """An empty file renders a bare region list."""
        assert pp_elf(elf64).splitlines()[-1] == "regions:"
