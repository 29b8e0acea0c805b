"""
Symbol table entries and the st_info bit-field codec.

st_info packs the symbol type in its low nibble and the binding in its
high nibble. The codec does not validate ranges: out-of-range values are
truncated by the bit operations, as they would be in the raw field.
"""

from dataclasses import dataclass
from typing import Sequence

from .enums import OpenEnum
from .sections import ElfSectionIndex

# =============================================================================
# Symbol type (ELF_ST_TYPE)
# =============================================================================


class ElfSymbolType(OpenEnum):
    """Symbol type (low nibble of st_info)."""

    PREFIX = "STT_"
    BITS = 8
    NAMES = {
        0: "NOTYPE",
        1: "OBJECT",
        2: "FUNC",
        3: "SECTION",
        4: "FILE",
        5: "COMMON",
        6: "TLS",
        10: "GNU_IFUNC",
    }


STT_NOTYPE = ElfSymbolType(0)
STT_OBJECT = ElfSymbolType(1)
STT_FUNC = ElfSymbolType(2)
STT_SECTION = ElfSymbolType(3)
STT_FILE = ElfSymbolType(4)
STT_COMMON = ElfSymbolType(5)
STT_TLS = ElfSymbolType(6)
STT_GNU_IFUNC = ElfSymbolType(10)


# =============================================================================
# Symbol binding (ELF_ST_BIND)
# =============================================================================


class ElfSymbolBinding(OpenEnum):
    """Symbol binding (high nibble of st_info)."""

    PREFIX = "STB_"
    BITS = 8
    NAMES = {
        0: "LOCAL",
        1: "GLOBAL",
        2: "WEAK",
        10: "GNU_UNIQUE",
    }


STB_LOCAL = ElfSymbolBinding(0)
STB_GLOBAL = ElfSymbolBinding(1)
STB_WEAK = ElfSymbolBinding(2)
STB_GNU_UNIQUE = ElfSymbolBinding(10)


def info_to_type_and_bind(info: int) -> tuple[ElfSymbolType, ElfSymbolBinding]:
    """Split an 8-bit st_info value into symbol type and binding."""
    return ElfSymbolType(info & 0x0F), ElfSymbolBinding((info >> 4) & 0x0F)


def type_and_bind_to_info(tp: ElfSymbolType, bind: ElfSymbolBinding) -> int:
    """Pack symbol type and binding into an 8-bit st_info value."""
    return (tp.code | (bind.code << 4)) & 0xFF


# =============================================================================
# Symbol table
# =============================================================================


@dataclass(frozen=True)
class ElfSymbolTableEntry:
    """One entry of a symbol table.

    The name is kept as bytes: ELF only says symbol names are
    null-terminated, not how they are encoded.
    """

    name: bytes
    type: ElfSymbolType
    bind: ElfSymbolBinding
    other: int  # st_other (visibility in the low bits)
    index: ElfSectionIndex  # Section in which the symbol is defined
    value: int
    size: int

    @property
    def info(self) -> int:
        """Packed st_info byte for this entry."""
        return type_and_bind_to_info(self.type, self.bind)

    @property
    def is_local(self) -> bool:
        return self.bind == STB_LOCAL


@dataclass(frozen=True)
class ElfSymbolTable:
    """A symbol table section.

    Local entries must precede global entries; the first entry is
    conventionally the null local symbol.
    """

    index: int  # Index of the section storing the table
    entries: tuple[ElfSymbolTableEntry, ...]
    local_entries: int  # Number of local entries (sh_info)

    def __post_init__(self):
        if not isinstance(self.entries, tuple):
            object.__setattr__(self, "entries", tuple(self.entries))
        if self.local_entries < 0 or self.local_entries > len(self.entries):
            raise ValueError(
                f"Symbol table {self.index}: local entry count "
                f"{self.local_entries} exceeds {len(self.entries)} entries"
            )

    @classmethod
    def from_entries(
        cls, index: int, entries: Sequence[ElfSymbolTableEntry]
    ) -> "ElfSymbolTable":
        """Build a table, ordering locals first and counting them.

        The relative order within locals and within globals is preserved.
        """
        local = [e for e in entries if e.is_local]
        nonlocal_ = [e for e in entries if not e.is_local]
        return cls(index=index, entries=tuple(local + nonlocal_), local_entries=len(local))

    @property
    def local_symbols(self) -> tuple[ElfSymbolTableEntry, ...]:
        return self.entries[: self.local_entries]

    @property
    def global_symbols(self) -> tuple[ElfSymbolTableEntry, ...]:
        return self.entries[self.local_entries :]

    def find(self, name: bytes) -> ElfSymbolTableEntry | None:
        """Find the first entry with the given name."""
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None
