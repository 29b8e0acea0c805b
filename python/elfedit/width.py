"""
ELF class (32/64-bit) and data encoding tags.

An ElfClass is the width witness for one file: it fixes the unsigned word
type used by every address, size and offset in that file. Code that must
work for both widths asks the witness for its ElfWordType instead of
branching on the class itself.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ElfWordType:
    """Unsigned machine word of a fixed bit width."""

    bits: int
    struct_code: str  # struct format character for one word

    @property
    def byte_width(self) -> int:
        return self.bits // 8

    @property
    def mask(self) -> int:
        return (1 << self.bits) - 1

    @property
    def max_value(self) -> int:
        return self.mask

    def fits(self, value: int) -> bool:
        """Check that value is representable as this word."""
        return 0 <= value <= self.max_value

    def wrap(self, value: int) -> int:
        """Reduce value modulo 2**bits (unsigned wraparound)."""
        return value & self.mask


WORD32 = ElfWordType(bits=32, struct_code="I")
WORD64 = ElfWordType(bits=64, struct_code="Q")


class ElfClass(Enum):
    """Whether an ELF file is 32-bit or 64-bit (e_ident[EI_CLASS])."""

    ELFCLASS32 = 1
    ELFCLASS64 = 2

    @property
    def word_type(self) -> ElfWordType:
        if self is ElfClass.ELFCLASS32:
            return WORD32
        return WORD64

    @property
    def byte_width(self) -> int:
        """Number of bytes in an address for this class."""
        return self.word_type.byte_width

    @property
    def bit_width(self) -> int:
        """Number of bits in an address for this class."""
        return self.word_type.bits

    def __str__(self) -> str:
        return self.name


ELFCLASS32 = ElfClass.ELFCLASS32
ELFCLASS64 = ElfClass.ELFCLASS64


def to_elf_class(tag: int) -> ElfClass | None:
    """Decode the EI_CLASS byte. Returns None for unknown tags."""
    if tag == 1:
        return ElfClass.ELFCLASS32
    if tag == 2:
        return ElfClass.ELFCLASS64
    return None


def from_elf_class(elf_class: ElfClass) -> int:
    """Encode an ElfClass as its EI_CLASS byte."""
    return elf_class.value


def elf_class_instances(elf_class: ElfClass, fn: Callable[[ElfWordType], T]) -> T:
    """Run width-generic code with the word type of elf_class."""
    return fn(elf_class.word_type)


class ElfData(Enum):
    """Byte order used to encode multi-byte fields (e_ident[EI_DATA])."""

    ELFDATA2LSB = 1  # Least significant byte first
    ELFDATA2MSB = 2  # Most significant byte first

    @property
    def struct_prefix(self) -> str:
        """struct byte-order prefix for this encoding."""
        return "<" if self is ElfData.ELFDATA2LSB else ">"

    def __str__(self) -> str:
        return self.name


ELFDATA2LSB = ElfData.ELFDATA2LSB
ELFDATA2MSB = ElfData.ELFDATA2MSB


def to_elf_data(tag: int) -> ElfData | None:
    """Decode the EI_DATA byte. Returns None for unknown tags."""
    if tag == 1:
        return ElfData.ELFDATA2LSB
    if tag == 2:
        return ElfData.ELFDATA2MSB
    return None


def from_elf_data(data: ElfData) -> int:
    """Encode an ElfData as its EI_DATA byte."""
    return data.value
