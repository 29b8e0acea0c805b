"""
Diagnostic rendering of the region tree.

Produces plain multi-line text: a segment prints its scalar fields on
labelled lines, then its regions indented beneath "data:". Rendering is
pure and never fails for well-formed values.
"""

from dataclasses import dataclass

from .elf import Elf
from .regions import (
    ElfDataElfHeader,
    ElfDataGOT,
    ElfDataRaw,
    ElfDataRegion,
    ElfDataSection,
    ElfDataSectionHeaders,
    ElfDataSectionNameTable,
    ElfDataSegment,
    ElfDataSegmentHeaders,
    ElfDataStrtab,
    ElfDataSymtab,
    ElfSegment,
)
from .sections import ElfSection
from .symbols import ElfSymbolTable
from .types import ElfGOT
from .utils import pp_hex
from .width import ElfClass


@dataclass(frozen=True)
class RenderOptions:
    """Layout options for the renderer."""

    indent: int = 2  # Spaces per nesting level
    raw_preview_bytes: int | None = None  # Bytes of raw data shown; None shows all


DEFAULT_OPTIONS = RenderOptions()


def _indent(lines: list[str], width: int) -> list[str]:
    pad = " " * width
    return [pad + line if line else line for line in lines]


def _segment_lines(seg: ElfSegment, bits: int, opts: RenderOptions) -> list[str]:
    lines = [
        f"type:  {seg.type}",
        f"flags: {seg.flags}",
        f"index: {seg.index}",
        f"vaddr: {pp_hex(seg.virt_addr, bits)}",
        f"paddr: {pp_hex(seg.phys_addr, bits)}",
        f"align: {seg.align}",
        f"msize: {seg.mem_size}",
        "data:",
    ]
    for region in seg.data:
        lines.extend(_indent(_region_lines(region, bits, opts), opts.indent))
    return lines


def _got_text(got: ElfGOT, bits: int) -> str:
    return (
        f"{got.name.decode('ascii', errors='replace')} (section number {got.index}) "
        f"addr {pp_hex(got.addr, bits)} align {got.addralign} "
        f"entsize {got.entsize} size {got.size}"
    )


def _section_text(sec: ElfSection, bits: int) -> str:
    return (
        f"{sec.display_name} (section number {sec.index}) {sec.type} "
        f"[{sec.flags}] addr {pp_hex(sec.addr, bits)} size {sec.size} "
        f"link {sec.link} info {sec.info} align {sec.addralign} "
        f"entsize {sec.entsize}"
    )


def _symtab_lines(symtab: ElfSymbolTable, bits: int) -> list[str]:
    lines = [
        f"symtab section: (section number {symtab.index}) "
        f"{len(symtab.entries)} entries, {symtab.local_entries} local"
    ]
    for entry in symtab.entries:
        name = entry.name.decode("ascii", errors="replace")
        lines.append(
            f"  {pp_hex(entry.value, bits)} {entry.size:>6} "
            f"{entry.type} {entry.bind} {entry.index} {name}"
        )
    return lines


def _raw_text(data: bytes, opts: RenderOptions) -> str:
    text = f"raw bytes: {len(data)} bytes"
    if not data:
        return text
    limit = opts.raw_preview_bytes
    if limit is None or len(data) <= limit:
        return f"{text} [{data.hex(' ')}]"
    preview = data[:limit].hex(" ") + " ..."
    return f"{text} [{preview}]"


def _region_lines(region: ElfDataRegion, bits: int, opts: RenderOptions) -> list[str]:
    if isinstance(region, ElfDataElfHeader):
        return ["ELF header"]
    if isinstance(region, ElfDataSegmentHeaders):
        return ["segment header table"]
    if isinstance(region, ElfDataSegment):
        return ["contained segment"] + _indent(
            _segment_lines(region.segment, bits, opts), opts.indent
        )
    if isinstance(region, ElfDataSectionHeaders):
        return ["section header table"]
    if isinstance(region, ElfDataSectionNameTable):
        return [f"section name table (section number {region.index})"]
    if isinstance(region, ElfDataGOT):
        return [f"global offset table: {_got_text(region.got, bits)}"]
    if isinstance(region, ElfDataStrtab):
        return [f"strtab section (section number {region.index})"]
    if isinstance(region, ElfDataSymtab):
        return _symtab_lines(region.symtab, bits)
    if isinstance(region, ElfDataSection):
        return [f"other section: {_section_text(region.section, bits)}"]
    if isinstance(region, ElfDataRaw):
        return [_raw_text(region.data, opts)]
    raise TypeError(f"Not an ELF data region: {type(region).__name__}")


def pp_segment(
    segment: ElfSegment, elf_class: ElfClass, options: RenderOptions | None = None
) -> str:
    """Render a segment and the regions it contains."""
    opts = options or DEFAULT_OPTIONS
    return "\n".join(_segment_lines(segment, elf_class.bit_width, opts))


def pp_region(
    region: ElfDataRegion, elf_class: ElfClass, options: RenderOptions | None = None
) -> str:
    """Render a single region (recursively, for nested segments)."""
    opts = options or DEFAULT_OPTIONS
    return "\n".join(_region_lines(region, elf_class.bit_width, opts))


def pp_elf(elf: Elf, options: RenderOptions | None = None) -> str:
    """Render the header fields, GNU extensions and region tree of a file."""
    opts = options or DEFAULT_OPTIONS
    bits = elf.elf_class.bit_width
    lines = [
        f"class:       {elf.elf_class}",
        f"data:        {elf.data}",
        f"osabi:       {elf.osabi}",
        f"abi version: {elf.abi_version}",
        f"type:        {elf.type}",
        f"machine:     {elf.machine}",
        f"entry:       {pp_hex(elf.entry, bits)}",
        f"flags:       {pp_hex(elf.flags, 32)}",
    ]
    if elf.gnu_stack is not None:
        kind = "executable" if elf.gnu_stack.is_executable else "non-executable"
        lines.append(f"gnu stack:   {kind} (segment {elf.gnu_stack.segment_index})")
    for relro in elf.gnu_relro_regions:
        lines.append(
            f"gnu relro:   segment {relro.segment_index} protects segment "
            f"{relro.ref_segment_index} from {pp_hex(relro.addr_start, bits)} "
            f"size {relro.size}"
        )
    lines.append("regions:")
    for region in elf.file_data:
        lines.extend(_indent(_region_lines(region, bits, opts), opts.indent))
    return "\n".join(lines)
