"""
Generic ELF section values.

ElfSection is the uninterpreted form of a section: header fields plus raw
contents. Specialised sections (GOT, symbol tables) convert to it.
"""

from dataclasses import dataclass

from .enums import FlagSet, OpenEnum

# =============================================================================
# Section types (sh_type)
# =============================================================================


class ElfSectionType(OpenEnum):
    """Section type."""

    PREFIX = "SHT_"
    BITS = 32
    NAMES = {
        0: "NULL",
        1: "PROGBITS",
        2: "SYMTAB",
        3: "STRTAB",
        4: "RELA",
        5: "HASH",
        6: "DYNAMIC",
        7: "NOTE",
        8: "NOBITS",
        9: "REL",
        10: "SHLIB",
        11: "DYNSYM",
        14: "INIT_ARRAY",
        15: "FINI_ARRAY",
        16: "PREINIT_ARRAY",
        17: "GROUP",
        18: "SYMTAB_SHNDX",
        0x6FFFFFF6: "GNU_HASH",
        0x6FFFFFFD: "GNU_verdef",
        0x6FFFFFFE: "GNU_verneed",
        0x6FFFFFFF: "GNU_versym",
    }


SHT_NULL = ElfSectionType(0)
SHT_PROGBITS = ElfSectionType(1)
SHT_SYMTAB = ElfSectionType(2)
SHT_STRTAB = ElfSectionType(3)
SHT_RELA = ElfSectionType(4)
SHT_HASH = ElfSectionType(5)
SHT_DYNAMIC = ElfSectionType(6)
SHT_NOTE = ElfSectionType(7)
SHT_NOBITS = ElfSectionType(8)
SHT_REL = ElfSectionType(9)
SHT_SHLIB = ElfSectionType(10)
SHT_DYNSYM = ElfSectionType(11)
SHT_INIT_ARRAY = ElfSectionType(14)
SHT_FINI_ARRAY = ElfSectionType(15)
SHT_GNU_HASH = ElfSectionType(0x6FFFFFF6)


# =============================================================================
# Section flags (sh_flags)
# =============================================================================


class ElfSectionFlags(FlagSet):
    """Section attribute flags. Word-width field; masked at 64 bits."""

    BITS = 64
    NONE_NAME = "shf_none"
    BIT_NAMES = (
        "shf_write",
        "shf_alloc",
        "shf_execinstr",
        "",
        "shf_merge",
        "shf_strings",
        "shf_info_link",
        "shf_link_order",
        "shf_os_nonconforming",
        "shf_group",
        "shf_tls",
        "shf_compressed",
    )


SHF_NONE = ElfSectionFlags(0)
SHF_WRITE = ElfSectionFlags(0x1)
SHF_ALLOC = ElfSectionFlags(0x2)
SHF_EXECINSTR = ElfSectionFlags(0x4)
SHF_MERGE = ElfSectionFlags(0x10)
SHF_STRINGS = ElfSectionFlags(0x20)
SHF_INFO_LINK = ElfSectionFlags(0x40)
SHF_LINK_ORDER = ElfSectionFlags(0x80)
SHF_GROUP = ElfSectionFlags(0x200)
SHF_TLS = ElfSectionFlags(0x400)


# =============================================================================
# Section indices (st_shndx and friends)
# =============================================================================


class ElfSectionIndex(OpenEnum):
    """Index of a section, or one of the reserved SHN_* markers."""

    PREFIX = "SHN_"
    BITS = 16
    NAMES = {
        0: "UNDEF",
        0xFFF1: "ABS",
        0xFFF2: "COMMON",
        0xFFFF: "XINDEX",
    }

    @property
    def is_reserved(self) -> bool:
        """Check if this index is in the reserved range (not a real section)."""
        return self.code == 0 or self.code >= SHN_LORESERVE_CODE

    def __str__(self) -> str:
        # Ordinary indices read better in decimal.
        return self.name or str(self.code)


SHN_LORESERVE_CODE = 0xFF00

SHN_UNDEF = ElfSectionIndex(0)
SHN_ABS = ElfSectionIndex(0xFFF1)
SHN_COMMON = ElfSectionIndex(0xFFF2)
SHN_XINDEX = ElfSectionIndex(0xFFFF)


# =============================================================================
# Section
# =============================================================================


@dataclass(frozen=True)
class ElfSection:
    """A section with no special interpretation.

    Mirrors the section header fields, with the name resolved to bytes and
    the contents attached. ELF does not fix a name encoding, so names stay
    as bytes.
    """

    index: int  # Position in the section header table
    name: bytes
    type: ElfSectionType
    flags: ElfSectionFlags
    addr: int  # Virtual address (if SHF_ALLOC set)
    size: int  # Size in memory; may differ from len(data) for SHT_NOBITS
    link: int
    info: int
    addralign: int  # 0 or 1 means none
    entsize: int
    data: bytes = b""

    @property
    def display_name(self) -> str:
        """Section name decoded for display."""
        return self.name.decode("ascii", errors="replace")

    @property
    def end_addr(self) -> int:
        """Virtual address of end of section."""
        return self.addr + self.size

    @property
    def is_alloc(self) -> bool:
        """Check if this section occupies memory at runtime."""
        return self.flags.has(SHF_ALLOC)

    @property
    def is_nobits(self) -> bool:
        """Check if this section has no file content (like BSS)."""
        return self.type == SHT_NOBITS
