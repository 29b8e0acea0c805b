"""
elfedit: an in-memory model of ELF files for 32-bit and 64-bit classes.

The model is the shared vocabulary of ELF readers and writers:
- width: ElfClass width witness and ElfData byte order
- types: segment types/flags, memory sizes, GOT, GNU extensions
- regions: ElfSegment and the region tree, with pre-order traversal
- elf: the Elf container and its header projection
- pretty: diagnostic rendering of the region tree
- verify: structural checks of model invariants
- snapshot: MessagePack (optionally zstd) snapshots of a model

Typical use:

    from elfedit import (
        ELFCLASS64, ELFDATA2LSB, EM_X86_64, ET_EXEC,
        ElfDataElfHeader, ElfDataSegmentHeaders, empty_elf, pp_elf,
    )

    elf = empty_elf(ELFDATA2LSB, ELFCLASS64, ET_EXEC, EM_X86_64)
    elf = elf.with_file_data([ElfDataElfHeader(), ElfDataSegmentHeaders()])
    print(pp_elf(elf))
"""

from .utils import (
    Range,
    has_permissions,
    in_range,
    slice_bytes,
    slice_chunks,
    pp_hex,
    show_flags,
)
from .enums import (
    OpenEnum,
    FlagSet,
    ElfOSABI,
    ElfType,
    ElfMachine,
    ELFOSABI_SYSV,
    ELFOSABI_LINUX,
    ELFOSABI_FREEBSD,
    ET_NONE,
    ET_REL,
    ET_EXEC,
    ET_DYN,
    ET_CORE,
    EM_NONE,
    EM_386,
    EM_ARM,
    EM_X86_64,
    EM_AARCH64,
    EM_RISCV,
)
from .width import (
    ElfClass,
    ElfData,
    ElfWordType,
    ELFCLASS32,
    ELFCLASS64,
    ELFDATA2LSB,
    ELFDATA2MSB,
    to_elf_class,
    from_elf_class,
    to_elf_data,
    from_elf_data,
    elf_class_instances,
)
from .sections import (
    ElfSection,
    ElfSectionType,
    ElfSectionFlags,
    ElfSectionIndex,
    SHT_NULL,
    SHT_PROGBITS,
    SHT_SYMTAB,
    SHT_STRTAB,
    SHT_NOBITS,
    SHF_NONE,
    SHF_WRITE,
    SHF_ALLOC,
    SHF_EXECINSTR,
    SHN_UNDEF,
    SHN_ABS,
    SHN_COMMON,
)
from .symbols import (
    ElfSymbolType,
    ElfSymbolBinding,
    ElfSymbolTableEntry,
    ElfSymbolTable,
    info_to_type_and_bind,
    type_and_bind_to_info,
    STT_NOTYPE,
    STT_OBJECT,
    STT_FUNC,
    STT_SECTION,
    STT_FILE,
    STB_LOCAL,
    STB_GLOBAL,
    STB_WEAK,
)
from .types import (
    ElfSegmentType,
    ElfSegmentFlags,
    ElfAbsoluteSize,
    ElfRelativeSize,
    ElfMemSize,
    ElfGOT,
    elf_got_section,
    ELF_GOT_SECTION_FLAGS,
    GnuStack,
    GnuRelroRegion,
    # Segment types
    PT_NULL,
    PT_LOAD,
    PT_DYNAMIC,
    PT_INTERP,
    PT_NOTE,
    PT_SHLIB,
    PT_PHDR,
    PT_TLS,
    PT_NUM,
    PT_LOOS,
    PT_GNU_EH_FRAME,
    PT_GNU_STACK,
    PT_GNU_RELRO,
    PT_PAX_FLAGS,
    PT_HIOS,
    PT_LOPROC,
    PT_HIPROC,
    # Segment flags
    PF_NONE,
    PF_X,
    PF_W,
    PF_R,
)
from .regions import (
    ElfSegment,
    ElfDataRegion,
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
    iter_data_regions,
    asum_regions,
    collect_regions,
    map_regions,
)
from .elf import (
    Elf,
    ElfHeader,
    EXPECTED_ELF_VERSION,
    empty_elf,
    elf_header,
    elf_file_data,
    asum_data_regions,
    collect_data_regions,
)
from .pretty import RenderOptions, pp_segment, pp_region, pp_elf
from .verify import VerificationResult, ElfModelVerifier
from .snapshot import SnapshotError, dump_elf, load_elf

__all__ = [
    # Utilities
    "Range",
    "has_permissions",
    "in_range",
    "slice_bytes",
    "slice_chunks",
    "pp_hex",
    "show_flags",
    # Enumerations
    "OpenEnum",
    "FlagSet",
    "ElfOSABI",
    "ElfType",
    "ElfMachine",
    "ELFOSABI_SYSV",
    "ELFOSABI_LINUX",
    "ELFOSABI_FREEBSD",
    "ET_NONE",
    "ET_REL",
    "ET_EXEC",
    "ET_DYN",
    "ET_CORE",
    "EM_NONE",
    "EM_386",
    "EM_ARM",
    "EM_X86_64",
    "EM_AARCH64",
    "EM_RISCV",
    # Width and encoding
    "ElfClass",
    "ElfData",
    "ElfWordType",
    "ELFCLASS32",
    "ELFCLASS64",
    "ELFDATA2LSB",
    "ELFDATA2MSB",
    "to_elf_class",
    "from_elf_class",
    "to_elf_data",
    "from_elf_data",
    "elf_class_instances",
    # Sections
    "ElfSection",
    "ElfSectionType",
    "ElfSectionFlags",
    "ElfSectionIndex",
    "SHT_NULL",
    "SHT_PROGBITS",
    "SHT_SYMTAB",
    "SHT_STRTAB",
    "SHT_NOBITS",
    "SHF_NONE",
    "SHF_WRITE",
    "SHF_ALLOC",
    "SHF_EXECINSTR",
    "SHN_UNDEF",
    "SHN_ABS",
    "SHN_COMMON",
    # Symbols
    "ElfSymbolType",
    "ElfSymbolBinding",
    "ElfSymbolTableEntry",
    "ElfSymbolTable",
    "info_to_type_and_bind",
    "type_and_bind_to_info",
    "STT_NOTYPE",
    "STT_OBJECT",
    "STT_FUNC",
    "STT_SECTION",
    "STT_FILE",
    "STB_LOCAL",
    "STB_GLOBAL",
    "STB_WEAK",
    # Segments and GNU extensions
    "ElfSegmentType",
    "ElfSegmentFlags",
    "ElfAbsoluteSize",
    "ElfRelativeSize",
    "ElfMemSize",
    "ElfGOT",
    "elf_got_section",
    "ELF_GOT_SECTION_FLAGS",
    "GnuStack",
    "GnuRelroRegion",
    "PT_NULL",
    "PT_LOAD",
    "PT_DYNAMIC",
    "PT_INTERP",
    "PT_NOTE",
    "PT_SHLIB",
    "PT_PHDR",
    "PT_TLS",
    "PT_NUM",
    "PT_LOOS",
    "PT_GNU_EH_FRAME",
    "PT_GNU_STACK",
    "PT_GNU_RELRO",
    "PT_PAX_FLAGS",
    "PT_HIOS",
    "PT_LOPROC",
    "PT_HIPROC",
    "PF_NONE",
    "PF_X",
    "PF_W",
    "PF_R",
    # Region tree
    "ElfSegment",
    "ElfDataRegion",
    "ElfDataElfHeader",
    "ElfDataSegmentHeaders",
    "ElfDataSegment",
    "ElfDataSectionHeaders",
    "ElfDataSectionNameTable",
    "ElfDataGOT",
    "ElfDataStrtab",
    "ElfDataSymtab",
    "ElfDataSection",
    "ElfDataRaw",
    "iter_data_regions",
    "asum_regions",
    "collect_regions",
    "map_regions",
    # Container
    "Elf",
    "ElfHeader",
    "EXPECTED_ELF_VERSION",
    "empty_elf",
    "elf_header",
    "elf_file_data",
    "asum_data_regions",
    "collect_data_regions",
    # Rendering
    "RenderOptions",
    "pp_segment",
    "pp_region",
    "pp_elf",
    # Verification
    "VerificationResult",
    "ElfModelVerifier",
    # Snapshots
    "SnapshotError",
    "dump_elf",
    "load_elf",
]
