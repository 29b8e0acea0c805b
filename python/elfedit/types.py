"""
ELF segment and GNU extension value types.

Segment types and flags are open code spaces backed by 32-bit fields.
Addresses and sizes are plain ints whose width is fixed by the ElfClass of
the file they belong to.
"""

from dataclasses import dataclass
from typing import Union

from .enums import FlagSet, OpenEnum
from .sections import SHF_ALLOC, SHF_WRITE, SHT_PROGBITS, ElfSection

# =============================================================================
# Segment types (p_type)
# =============================================================================


class ElfSegmentType(OpenEnum):
    """Program header segment type."""

    PREFIX = "PT_"
    BITS = 32
    NAMES = {
        0: "NULL",
        1: "LOAD",
        2: "DYNAMIC",
        3: "INTERP",
        4: "NOTE",
        5: "SHLIB",
        6: "PHDR",
        7: "TLS",
        0x6474E550: "GNU_EH_FRAME",
        0x6474E551: "GNU_STACK",
        0x6474E552: "GNU_RELRO",
        0x65041580: "PAX_FLAGS",
    }


PT_NULL = ElfSegmentType(0)  # Unused entry
PT_LOAD = ElfSegmentType(1)  # Loadable program segment
PT_DYNAMIC = ElfSegmentType(2)  # Dynamic linking information
PT_INTERP = ElfSegmentType(3)  # Program interpreter path name
PT_NOTE = ElfSegmentType(4)
PT_SHLIB = ElfSegmentType(5)  # Reserved
PT_PHDR = ElfSegmentType(6)  # Program header table
PT_TLS = ElfSegmentType(7)  # Thread-local storage template
PT_NUM = ElfSegmentType(8)  # Number of defined types
PT_LOOS = ElfSegmentType(0x60000000)
PT_GNU_EH_FRAME = ElfSegmentType(0x6474E550)  # .eh_frame_hdr
PT_GNU_STACK = ElfSegmentType(0x6474E551)
PT_GNU_RELRO = ElfSegmentType(0x6474E552)
PT_PAX_FLAGS = ElfSegmentType(0x65041580)
PT_HIOS = ElfSegmentType(0x6FFFFFFF)
PT_LOPROC = ElfSegmentType(0x70000000)
PT_HIPROC = ElfSegmentType(0x7FFFFFFF)


# =============================================================================
# Segment flags (p_flags)
# =============================================================================


class ElfSegmentFlags(FlagSet):
    """Permission bits on a segment."""

    BITS = 32
    NONE_NAME = "pf_none"
    BIT_NAMES = ("pf_x", "pf_w", "pf_r")


PF_NONE = ElfSegmentFlags(0)
PF_X = ElfSegmentFlags(0x1)  # Execute
PF_W = ElfSegmentFlags(0x2)  # Write
PF_R = ElfSegmentFlags(0x4)  # Read


# =============================================================================
# Memory size
# =============================================================================


@dataclass(frozen=True)
class ElfAbsoluteSize:
    """The region has the given absolute in-memory size.

    A writer only uses this size when it exceeds the size computed from the
    region's contents.
    """

    size: int

    def __str__(self) -> str:
        return f"absolute {self.size}"


@dataclass(frozen=True)
class ElfRelativeSize:
    """The given amount is added to the size computed from the contents."""

    size: int

    def __str__(self) -> str:
        return f"relative +{self.size}"


ElfMemSize = Union[ElfAbsoluteSize, ElfRelativeSize]


# =============================================================================
# Global offset table
# =============================================================================

ELF_GOT_SECTION_FLAGS = SHF_WRITE | SHF_ALLOC


@dataclass(frozen=True)
class ElfGOT:
    """A global offset table section."""

    index: int
    name: bytes
    addr: int
    addralign: int
    entsize: int
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    def to_section(self) -> ElfSection:
        """Convert to a generic writable, allocated SHT_PROGBITS section."""
        return ElfSection(
            index=self.index,
            name=self.name,
            type=SHT_PROGBITS,
            flags=ELF_GOT_SECTION_FLAGS,
            addr=self.addr,
            size=self.size,
            link=0,
            info=0,
            addralign=self.addralign,
            entsize=self.entsize,
            data=self.data,
        )


def elf_got_section(got: ElfGOT) -> ElfSection:
    """Convert a GOT to a standard section."""
    return got.to_section()


# =============================================================================
# GNU extensions
# =============================================================================


@dataclass(frozen=True)
class GnuStack:
    """Contents of a PT_GNU_STACK segment."""

    segment_index: int  # Program header index to use
    is_executable: bool  # Whether loaders should make the stack executable


@dataclass(frozen=True)
class GnuRelroRegion:
    """Contents of a PT_GNU_RELRO segment.

    Marks part of a writable segment to be made read-only once relocations
    have been applied.
    """

    segment_index: int  # Program header index to use
    ref_segment_index: int  # Index of the segment this region protects
    addr_start: int  # Base virtual address; consumers round down to alignment
    size: int  # Bytes to protect
