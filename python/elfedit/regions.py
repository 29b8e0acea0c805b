"""
The region tree: what an ELF file contains, and how segments nest.

A file is an ordered sequence of regions. Some regions are markers for
tables whose bytes a writer generates (the ELF header, the program and
section header tables, the section name table); others carry content
(sections, symbol tables, raw bytes). An ElfDataSegment region wraps a
segment, which holds its own ordered region sequence, so loadable segments
can contain headers, sections and further segments.

Every region owns its payload; nothing points back at a parent or sibling.

Traversal is pre-order: a segment region is visited, then its children,
then the next sibling.
"""

from dataclasses import dataclass, replace
from typing import Callable, Iterable, Iterator, Sequence, TypeVar, Union

from .sections import ElfSection
from .symbols import ElfSymbolTable
from .types import PT_LOAD, ElfGOT, ElfMemSize, ElfSegmentFlags, ElfSegmentType

T = TypeVar("T")


@dataclass(frozen=True)
class ElfSegment:
    """A program header entry and the regions it covers."""

    type: ElfSegmentType
    flags: ElfSegmentFlags
    index: int  # 0-based position in the program header table; unique per file
    virt_addr: int
    phys_addr: int  # Conventionally equal to virt_addr
    align: int  # p_align; 0 or 1 means none, otherwise a power of two
    mem_size: ElfMemSize
    data: tuple["ElfDataRegion", ...] = ()

    def __post_init__(self):
        if not isinstance(self.data, tuple):
            object.__setattr__(self, "data", tuple(self.data))

    def with_data(self, data: Sequence["ElfDataRegion"]) -> "ElfSegment":
        """Return a copy of this segment holding the given regions."""
        return replace(self, data=tuple(data))

    @property
    def is_load(self) -> bool:
        return self.type == PT_LOAD


# =============================================================================
# Region variants
# =============================================================================


@dataclass(frozen=True)
class ElfDataElfHeader:
    """The ELF file header. First in an in-order traversal of a file."""


@dataclass(frozen=True)
class ElfDataSegmentHeaders:
    """The program header table."""


@dataclass(frozen=True)
class ElfDataSegment:
    """A segment nested in the file or in another segment."""

    segment: ElfSegment


@dataclass(frozen=True)
class ElfDataSectionHeaders:
    """The section header table."""


@dataclass(frozen=True)
class ElfDataSectionNameTable:
    """The section name string table.

    Its contents are generated, so only the section index is kept.
    """

    index: int


@dataclass(frozen=True)
class ElfDataGOT:
    """A global offset table."""

    got: ElfGOT


@dataclass(frozen=True)
class ElfDataStrtab:
    """The .strtab section (contents generated from the symbol table)."""

    index: int


@dataclass(frozen=True)
class ElfDataSymtab:
    """The .symtab section."""

    symtab: ElfSymbolTable


@dataclass(frozen=True)
class ElfDataSection:
    """A section with no special interpretation."""

    section: ElfSection


@dataclass(frozen=True)
class ElfDataRaw:
    """Uninterpreted bytes (padding, unknown content)."""

    data: bytes


ElfDataRegion = Union[
    ElfDataElfHeader,
    ElfDataSegmentHeaders,
    ElfDataSegment,
    ElfDataSectionHeaders,
    ElfDataSectionNameTable,
    ElfDataGOT,
    ElfDataStrtab,
    ElfDataSymtab,
    ElfDataSection,
    ElfDataRaw,
]


# =============================================================================
# Traversal
# =============================================================================


def iter_data_regions(regions: Iterable[ElfDataRegion]) -> Iterator[ElfDataRegion]:
    """Yield every region in pre-order, descending into nested segments."""
    for region in regions:
        yield region
        if isinstance(region, ElfDataSegment):
            yield from iter_data_regions(region.segment.data)


def asum_regions(
    f: Callable[[ElfDataRegion], T | None], regions: Iterable[ElfDataRegion]
) -> T | None:
    """Return the first non-None f(region) in pre-order, or None.

    Stops visiting as soon as a result is found.
    """
    for region in iter_data_regions(regions):
        result = f(region)
        if result is not None:
            return result
    return None


def collect_regions(
    f: Callable[[ElfDataRegion], Iterable[T]], regions: Iterable[ElfDataRegion]
) -> list[T]:
    """Concatenate f(region) over every region in pre-order."""
    results: list[T] = []
    for region in iter_data_regions(regions):
        results.extend(f(region))
    return results


def map_regions(
    f: Callable[[ElfDataRegion], ElfDataRegion], regions: Iterable[ElfDataRegion]
) -> tuple[ElfDataRegion, ...]:
    """Rebuild a region sequence with f applied to every region.

    Children of a segment are rewritten before f sees the segment region
    itself, so f always receives the updated subtree.
    """
    out = []
    for region in regions:
        if isinstance(region, ElfDataSegment):
            seg = region.segment
            region = ElfDataSegment(seg.with_data(map_regions(f, seg.data)))
        out.append(f(region))
    return tuple(out)


def region_section(region: ElfDataRegion) -> ElfSection | None:
    """The generic section a region stands for, if it carries one."""
    if isinstance(region, ElfDataSection):
        return region.section
    if isinstance(region, ElfDataGOT):
        return region.got.to_section()
    return None
