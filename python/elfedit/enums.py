"""
Open enumerations and bit-flag sets for ELF header fields.

ELF code spaces are open: a file may carry any value in a field, and only
some values have names. OpenEnum wraps the raw code and looks up a display
name; unknown codes render as hex instead of failing.

FlagSet is the bitmask counterpart. Combination stays inside the field's
bit width, and unnamed bits survive rendering as a hex remainder.
"""

from dataclasses import dataclass
from typing import ClassVar

from .utils import has_permissions, pp_hex, show_flags


@dataclass(frozen=True, order=True, repr=False)
class OpenEnum:
    """A raw code from an open ELF code space."""

    code: int

    PREFIX: ClassVar[str] = ""
    BITS: ClassVar[int] = 32
    NAMES: ClassVar[dict[int, str]] = {}

    @property
    def name(self) -> str | None:
        """Symbolic name (e.g. "PT_LOAD"), or None for unnamed codes."""
        name = self.NAMES.get(self.code)
        if name is None:
            return None
        return self.PREFIX + name

    def __int__(self) -> int:
        return self.code

    def __index__(self) -> int:
        return self.code

    def __str__(self) -> str:
        return self.name or pp_hex(self.code, self.BITS)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"


@dataclass(frozen=True, repr=False)
class FlagSet:
    """A fixed-width bitmask with named low bits."""

    value: int = 0

    BITS: ClassVar[int] = 32
    NONE_NAME: ClassVar[str] = "none"
    BIT_NAMES: ClassVar[tuple[str, ...]] = ()

    @classmethod
    def mask(cls) -> int:
        return (1 << cls.BITS) - 1

    def _other_value(self, other) -> int | None:
        if isinstance(other, type(self)):
            return other.value
        if isinstance(other, int) and not isinstance(other, bool):
            return other
        return None

    def __or__(self, other):
        v = self._other_value(other)
        if v is None:
            return NotImplemented
        return type(self)((self.value | v) & self.mask())

    __ror__ = __or__

    def __and__(self, other):
        v = self._other_value(other)
        if v is None:
            return NotImplemented
        return type(self)(self.value & v & self.mask())

    __rand__ = __and__

    def __xor__(self, other):
        v = self._other_value(other)
        if v is None:
            return NotImplemented
        return type(self)((self.value ^ v) & self.mask())

    __rxor__ = __xor__

    def __invert__(self):
        return type(self)(~self.value & self.mask())

    def __eq__(self, other) -> bool:
        v = self._other_value(other)
        if v is None:
            return NotImplemented
        return self.value == v

    def __hash__(self) -> int:
        return hash(self.value)

    def __bool__(self) -> bool:
        return self.value != 0

    def __int__(self) -> int:
        return self.value

    def __index__(self) -> int:
        return self.value

    def has(self, required) -> bool:
        """Check that every bit of required is set."""
        return has_permissions(self, required)

    def __str__(self) -> str:
        return show_flags(self.NONE_NAME, self.BIT_NAMES, self.value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"


# =============================================================================
# OS/ABI (e_ident[EI_OSABI])
# =============================================================================


class ElfOSABI(OpenEnum):
    """Operating system and ABI the object targets."""

    PREFIX = "ELFOSABI_"
    BITS = 8
    NAMES = {
        0: "SYSV",
        1: "HPUX",
        2: "NETBSD",
        3: "LINUX",
        4: "HURD",
        6: "SOLARIS",
        7: "AIX",
        8: "IRIX",
        9: "FREEBSD",
        10: "TRU64",
        11: "MODESTO",
        12: "OPENBSD",
        13: "OPENVMS",
        14: "NSK",
        15: "AROS",
        16: "FENIXOS",
        17: "CLOUDABI",
        64: "ARM_AEABI",
        97: "ARM",
        255: "STANDALONE",
    }


ELFOSABI_SYSV = ElfOSABI(0)
ELFOSABI_HPUX = ElfOSABI(1)
ELFOSABI_NETBSD = ElfOSABI(2)
ELFOSABI_LINUX = ElfOSABI(3)
ELFOSABI_SOLARIS = ElfOSABI(6)
ELFOSABI_FREEBSD = ElfOSABI(9)
ELFOSABI_OPENBSD = ElfOSABI(12)
ELFOSABI_ARM = ElfOSABI(97)
ELFOSABI_STANDALONE = ElfOSABI(255)


# =============================================================================
# Object file type (e_type)
# =============================================================================


class ElfType(OpenEnum):
    """Object file type."""

    PREFIX = "ET_"
    BITS = 16
    NAMES = {
        0: "NONE",
        1: "REL",
        2: "EXEC",
        3: "DYN",
        4: "CORE",
    }


ET_NONE = ElfType(0)
ET_REL = ElfType(1)
ET_EXEC = ElfType(2)
ET_DYN = ElfType(3)  # Shared object (or PIE executable)
ET_CORE = ElfType(4)
ET_LOOS = ElfType(0xFE00)
ET_HIOS = ElfType(0xFEFF)
ET_LOPROC = ElfType(0xFF00)
ET_HIPROC = ElfType(0xFFFF)


# =============================================================================
# Machine (e_machine)
# =============================================================================


class ElfMachine(OpenEnum):
    """Target instruction set architecture."""

    PREFIX = "EM_"
    BITS = 16
    NAMES = {
        0: "NONE",
        1: "M32",
        2: "SPARC",
        3: "386",
        4: "68K",
        5: "88K",
        7: "860",
        8: "MIPS",
        15: "PARISC",
        18: "SPARC32PLUS",
        20: "PPC",
        21: "PPC64",
        22: "S390",
        40: "ARM",
        42: "SH",
        43: "SPARCV9",
        50: "IA_64",
        62: "X86_64",
        83: "AVR",
        105: "MSP430",
        183: "AARCH64",
        224: "AMDGPU",
        243: "RISCV",
        247: "BPF",
        258: "LOONGARCH",
    }


EM_NONE = ElfMachine(0)
EM_SPARC = ElfMachine(2)
EM_386 = ElfMachine(3)
EM_MIPS = ElfMachine(8)
EM_PPC = ElfMachine(20)
EM_PPC64 = ElfMachine(21)
EM_S390 = ElfMachine(22)
EM_ARM = ElfMachine(40)
EM_X86_64 = ElfMachine(62)
EM_AARCH64 = ElfMachine(183)
EM_AMDGPU = ElfMachine(224)
EM_RISCV = ElfMachine(243)
EM_BPF = ElfMachine(247)
