"""
The top-level ELF container and its header projection.

An Elf value is immutable: edits produce new values through with_* helpers
or dataclasses.replace. Parsers start from empty_elf() and fill in the
region sequence; writers and the renderer walk it.
"""

from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, Sequence, TypeVar

from .enums import ELFOSABI_SYSV, ElfMachine, ElfOSABI, ElfType
from .regions import (
    ElfDataRegion,
    ElfDataSegment,
    ElfSegment,
    asum_regions,
    collect_regions,
    iter_data_regions,
    map_regions,
    region_section,
)
from .sections import ElfSection
from .types import GnuRelroRegion, GnuStack
from .width import ElfClass, ElfData, ElfWordType

T = TypeVar("T")

# Version of the ELF format this model describes (e_ident[EI_VERSION])
EXPECTED_ELF_VERSION = 1


@dataclass(frozen=True)
class ElfHeader:
    """Header fields that need no further parsing."""

    data: ElfData
    elf_class: ElfClass
    osabi: ElfOSABI
    abi_version: int
    type: ElfType
    machine: ElfMachine
    entry: int
    flags: int


@dataclass(frozen=True)
class Elf:
    """The contents of an ELF file.

    All word-valued fields (entry, addresses, sizes) must fit the word type
    of elf_class. This is not checked on construction; see
    ElfModelVerifier.
    """

    data: ElfData  # Data encoding of the object file
    elf_class: ElfClass  # Width of the file
    osabi: ElfOSABI
    abi_version: int
    type: ElfType
    machine: ElfMachine
    entry: int  # Entry point virtual address; 0 for non-executables
    flags: int  # Processor-specific flags (e_flags)
    file_data: tuple[ElfDataRegion, ...] = ()
    gnu_stack: GnuStack | None = None
    gnu_relro_regions: tuple[GnuRelroRegion, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not isinstance(self.file_data, tuple):
            object.__setattr__(self, "file_data", tuple(self.file_data))
        if not isinstance(self.gnu_relro_regions, tuple):
            object.__setattr__(self, "gnu_relro_regions", tuple(self.gnu_relro_regions))

    @property
    def word_type(self) -> ElfWordType:
        return self.elf_class.word_type

    @property
    def header(self) -> ElfHeader:
        return elf_header(self)

    # -- Editing -----------------------------------------------------------

    def with_file_data(self, regions: Sequence[ElfDataRegion]) -> "Elf":
        """Return a copy with the top-level region sequence replaced."""
        return replace(self, file_data=tuple(regions))

    def append_region(self, region: ElfDataRegion) -> "Elf":
        return replace(self, file_data=self.file_data + (region,))

    def map_regions(self, f: Callable[[ElfDataRegion], ElfDataRegion]) -> "Elf":
        """Return a copy with f applied to every region, innermost first."""
        return replace(self, file_data=map_regions(f, self.file_data))

    # -- Queries -----------------------------------------------------------

    def iter_regions(self) -> Iterable[ElfDataRegion]:
        """All regions in pre-order, including those inside segments."""
        return iter_data_regions(self.file_data)

    def segments(self) -> list[ElfSegment]:
        """All segments in the region tree, in pre-order."""
        return collect_data_regions(
            lambda r: [r.segment] if isinstance(r, ElfDataSegment) else [], self
        )

    def sections(self) -> list[ElfSection]:
        """All sections carried by regions, with GOTs as generic sections."""
        return [s for r in self.iter_regions() if (s := region_section(r)) is not None]

    def find_section(self, name: bytes) -> ElfSection | None:
        """Find the first section with the given name."""

        def match(region: ElfDataRegion) -> ElfSection | None:
            section = region_section(region)
            if section is not None and section.name == name:
                return section
            return None

        return asum_data_regions(match, self)

    def segment_count(self) -> int:
        """Number of program headers this file needs.

        Counts every segment in the tree plus the GNU stack and relro
        entries, which have no region of their own.
        """
        count = len(self.segments()) + len(self.gnu_relro_regions)
        if self.gnu_stack is not None:
            count += 1
        return count


def empty_elf(
    data: ElfData, elf_class: ElfClass, type: ElfType, machine: ElfMachine
) -> Elf:
    """Create an empty ELF file.

    OS/ABI defaults to System V; ABI version, entry and flags are zero.
    """
    return Elf(
        data=data,
        elf_class=elf_class,
        osabi=ELFOSABI_SYSV,
        abi_version=0,
        type=type,
        machine=machine,
        entry=0,
        flags=0,
        file_data=(),
        gnu_stack=None,
        gnu_relro_regions=(),
    )


def elf_header(elf: Elf) -> ElfHeader:
    """Project the header-identifying fields of an ELF file."""
    return ElfHeader(
        data=elf.data,
        elf_class=elf.elf_class,
        osabi=elf.osabi,
        abi_version=elf.abi_version,
        type=elf.type,
        machine=elf.machine,
        entry=elf.entry,
        flags=elf.flags,
    )


def elf_file_data(elf: Elf) -> tuple[ElfDataRegion, ...]:
    """Top-level regions of an ELF file."""
    return elf.file_data


def asum_data_regions(f: Callable[[ElfDataRegion], T | None], elf: Elf) -> T | None:
    """Return the first non-None f(region) over the file in pre-order."""
    return asum_regions(f, elf.file_data)


def collect_data_regions(f: Callable[[ElfDataRegion], Iterable[T]], elf: Elf) -> list[T]:
    """Concatenate f(region) over the file in pre-order."""
    return collect_regions(f, elf.file_data)
