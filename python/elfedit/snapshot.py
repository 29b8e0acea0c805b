"""
MessagePack snapshots of an ELF model.

A snapshot captures the logical model (header fields, region tree, GNU
extensions), not ELF file layout. It lets a parsed model be cached or
shipped between processes without re-parsing the binary.

Format: a MessagePack map {"format": "elfedit-model", "version": 1,
"elf": {...}}, optionally wrapped in a zstd frame. Regions are encoded as
[tag, payload] lists.
"""

import logging
from typing import Any, Callable

import msgpack
import zstandard as zstd

from .elf import Elf
from .enums import ElfMachine, ElfOSABI, ElfType
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
from .sections import ElfSection, ElfSectionFlags, ElfSectionIndex, ElfSectionType
from .symbols import (
    ElfSymbolBinding,
    ElfSymbolTable,
    ElfSymbolTableEntry,
    ElfSymbolType,
)
from .types import (
    ElfAbsoluteSize,
    ElfGOT,
    ElfMemSize,
    ElfRelativeSize,
    ElfSegmentFlags,
    ElfSegmentType,
    GnuRelroRegion,
    GnuStack,
)
from .width import to_elf_class, to_elf_data

logger = logging.getLogger(__name__)

SNAPSHOT_FORMAT = "elfedit-model"
SNAPSHOT_VERSION = 1
ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"


class SnapshotError(ValueError):
    """Raised when snapshot bytes cannot be decoded into a model."""

    pass


# =============================================================================
# Encoding
# =============================================================================


def _encode_section(sec: ElfSection) -> dict[str, Any]:
    return {
        "index": sec.index,
        "name": sec.name,
        "type": sec.type.code,
        "flags": sec.flags.value,
        "addr": sec.addr,
        "size": sec.size,
        "link": sec.link,
        "info": sec.info,
        "addralign": sec.addralign,
        "entsize": sec.entsize,
        "data": sec.data,
    }


def _encode_symtab(symtab: ElfSymbolTable) -> dict[str, Any]:
    return {
        "index": symtab.index,
        "local_entries": symtab.local_entries,
        "entries": [
            [e.name, e.type.code, e.bind.code, e.other, e.index.code, e.value, e.size]
            for e in symtab.entries
        ],
    }


def _encode_mem_size(mem_size: ElfMemSize) -> list:
    if isinstance(mem_size, ElfAbsoluteSize):
        return ["absolute", mem_size.size]
    return ["relative", mem_size.size]


def _encode_segment(seg: ElfSegment) -> dict[str, Any]:
    return {
        "type": seg.type.code,
        "flags": seg.flags.value,
        "index": seg.index,
        "vaddr": seg.virt_addr,
        "paddr": seg.phys_addr,
        "align": seg.align,
        "mem_size": _encode_mem_size(seg.mem_size),
        "data": [_encode_region(r) for r in seg.data],
    }


def _encode_region(region: ElfDataRegion) -> list:
    if isinstance(region, ElfDataElfHeader):
        return ["elf_header"]
    if isinstance(region, ElfDataSegmentHeaders):
        return ["segment_headers"]
    if isinstance(region, ElfDataSegment):
        return ["segment", _encode_segment(region.segment)]
    if isinstance(region, ElfDataSectionHeaders):
        return ["section_headers"]
    if isinstance(region, ElfDataSectionNameTable):
        return ["section_name_table", region.index]
    if isinstance(region, ElfDataGOT):
        got = region.got
        return [
            "got",
            {
                "index": got.index,
                "name": got.name,
                "addr": got.addr,
                "addralign": got.addralign,
                "entsize": got.entsize,
                "data": got.data,
            },
        ]
    if isinstance(region, ElfDataStrtab):
        return ["strtab", region.index]
    if isinstance(region, ElfDataSymtab):
        return ["symtab", _encode_symtab(region.symtab)]
    if isinstance(region, ElfDataSection):
        return ["section", _encode_section(region.section)]
    if isinstance(region, ElfDataRaw):
        return ["raw", region.data]
    raise TypeError(f"Not an ELF data region: {type(region).__name__}")


def _encode_elf(elf: Elf) -> dict[str, Any]:
    gnu_stack = None
    if elf.gnu_stack is not None:
        gnu_stack = [elf.gnu_stack.segment_index, elf.gnu_stack.is_executable]
    return {
        "data": elf.data.value,
        "class": elf.elf_class.value,
        "osabi": elf.osabi.code,
        "abi_version": elf.abi_version,
        "type": elf.type.code,
        "machine": elf.machine.code,
        "entry": elf.entry,
        "flags": elf.flags,
        "regions": [_encode_region(r) for r in elf.file_data],
        "gnu_stack": gnu_stack,
        "gnu_relro": [
            [r.segment_index, r.ref_segment_index, r.addr_start, r.size]
            for r in elf.gnu_relro_regions
        ],
    }


def dump_elf(elf: Elf, *, compress: bool = False, level: int = 3) -> bytes:
    """Serialize an ELF model to snapshot bytes.

    Args:
        elf: Model to serialize
        compress: Wrap the MessagePack payload in a zstd frame
        level: zstd compression level (ignored unless compress is set)

    Returns:
        Snapshot bytes accepted by load_elf()
    """
    payload = msgpack.packb(
        {
            "format": SNAPSHOT_FORMAT,
            "version": SNAPSHOT_VERSION,
            "elf": _encode_elf(elf),
        },
        use_bin_type=True,
    )
    if not compress:
        logger.debug("Encoded ELF model snapshot: %d bytes", len(payload))
        return payload

    compressed = zstd.ZstdCompressor(level=level).compress(payload)
    logger.debug(
        "Encoded ELF model snapshot: %d bytes (%d compressed)",
        len(payload),
        len(compressed),
    )
    return compressed


# =============================================================================
# Decoding
# =============================================================================


def _int(value: Any, what: str) -> int:
    # msgpack decodes true/false as bool, which is an int subclass.
    if isinstance(value, bool) or not isinstance(value, int):
        raise SnapshotError(f"{what}: expected an integer, got {type(value).__name__}")
    return value


def _bytes(value: Any, what: str) -> bytes:
    if not isinstance(value, bytes):
        raise SnapshotError(f"{what}: expected bytes, got {type(value).__name__}")
    return value


def _bool(value: Any, what: str) -> bool:
    if not isinstance(value, bool):
        raise SnapshotError(f"{what}: expected a boolean, got {type(value).__name__}")
    return value


def _decode_section(d: dict[str, Any]) -> ElfSection:
    return ElfSection(
        index=_int(d["index"], "section index"),
        name=_bytes(d["name"], "section name"),
        type=ElfSectionType(_int(d["type"], "section type")),
        flags=ElfSectionFlags(_int(d["flags"], "section flags")),
        addr=_int(d["addr"], "section addr"),
        size=_int(d["size"], "section size"),
        link=_int(d["link"], "section link"),
        info=_int(d["info"], "section info"),
        addralign=_int(d["addralign"], "section addralign"),
        entsize=_int(d["entsize"], "section entsize"),
        data=_bytes(d["data"], "section data"),
    )


def _decode_symbol(v: list) -> ElfSymbolTableEntry:
    name, tp, bind, other, index, value, size = v
    return ElfSymbolTableEntry(
        name=_bytes(name, "symbol name"),
        type=ElfSymbolType(_int(tp, "symbol type")),
        bind=ElfSymbolBinding(_int(bind, "symbol binding")),
        other=_int(other, "symbol other"),
        index=ElfSectionIndex(_int(index, "symbol section index")),
        value=_int(value, "symbol value"),
        size=_int(size, "symbol size"),
    )


def _decode_symtab(d: dict[str, Any]) -> ElfSymbolTable:
    return ElfSymbolTable(
        index=_int(d["index"], "symtab index"),
        entries=tuple(_decode_symbol(v) for v in d["entries"]),
        local_entries=_int(d["local_entries"], "symtab local count"),
    )


def _decode_mem_size(v: list) -> ElfMemSize:
    kind, size = v
    size = _int(size, "segment memory size")
    if kind == "absolute":
        return ElfAbsoluteSize(size)
    if kind == "relative":
        return ElfRelativeSize(size)
    raise SnapshotError(f"Unknown memory size kind: {kind!r}")


def _decode_segment(d: dict[str, Any]) -> ElfSegment:
    return ElfSegment(
        type=ElfSegmentType(_int(d["type"], "segment type")),
        flags=ElfSegmentFlags(_int(d["flags"], "segment flags")),
        index=_int(d["index"], "segment index"),
        virt_addr=_int(d["vaddr"], "segment vaddr"),
        phys_addr=_int(d["paddr"], "segment paddr"),
        align=_int(d["align"], "segment align"),
        mem_size=_decode_mem_size(d["mem_size"]),
        data=tuple(_decode_region(r) for r in d["data"]),
    )


def _decode_got(d: dict[str, Any]) -> ElfGOT:
    return ElfGOT(
        index=_int(d["index"], "GOT index"),
        name=_bytes(d["name"], "GOT name"),
        addr=_int(d["addr"], "GOT addr"),
        addralign=_int(d["addralign"], "GOT addralign"),
        entsize=_int(d["entsize"], "GOT entsize"),
        data=_bytes(d["data"], "GOT data"),
    )


_REGION_DECODERS: dict[str, Callable[..., ElfDataRegion]] = {
    "elf_header": ElfDataElfHeader,
    "segment_headers": ElfDataSegmentHeaders,
    "segment": lambda d: ElfDataSegment(_decode_segment(d)),
    "section_headers": ElfDataSectionHeaders,
    "section_name_table": lambda i: ElfDataSectionNameTable(
        _int(i, "section name table index")
    ),
    "got": lambda d: ElfDataGOT(_decode_got(d)),
    "strtab": lambda i: ElfDataStrtab(_int(i, "strtab index")),
    "symtab": lambda d: ElfDataSymtab(_decode_symtab(d)),
    "section": lambda d: ElfDataSection(_decode_section(d)),
    "raw": lambda data: ElfDataRaw(_bytes(data, "raw region data")),
}


def _decode_region(v: list) -> ElfDataRegion:
    tag, *payload = v
    decoder = _REGION_DECODERS.get(tag)
    if decoder is None:
        raise SnapshotError(f"Unknown region tag: {tag!r}")
    return decoder(*payload)


def _decode_relro(v: list) -> GnuRelroRegion:
    segment_index, ref_segment_index, addr_start, size = v
    return GnuRelroRegion(
        segment_index=_int(segment_index, "relro segment index"),
        ref_segment_index=_int(ref_segment_index, "relro target index"),
        addr_start=_int(addr_start, "relro start"),
        size=_int(size, "relro size"),
    )


def _decode_elf(d: dict[str, Any]) -> Elf:
    data = to_elf_data(_int(d["data"], "data encoding tag"))
    if data is None:
        raise SnapshotError(f"Invalid data encoding tag: {d['data']!r}")
    elf_class = to_elf_class(_int(d["class"], "ELF class tag"))
    if elf_class is None:
        raise SnapshotError(f"Invalid ELF class tag: {d['class']!r}")

    gnu_stack = None
    if d["gnu_stack"] is not None:
        segment_index, is_executable = d["gnu_stack"]
        gnu_stack = GnuStack(
            segment_index=_int(segment_index, "gnu stack segment index"),
            is_executable=_bool(is_executable, "gnu stack executable flag"),
        )

    return Elf(
        data=data,
        elf_class=elf_class,
        osabi=ElfOSABI(_int(d["osabi"], "osabi")),
        abi_version=_int(d["abi_version"], "abi version"),
        type=ElfType(_int(d["type"], "e_type")),
        machine=ElfMachine(_int(d["machine"], "e_machine")),
        entry=_int(d["entry"], "entry"),
        flags=_int(d["flags"], "e_flags"),
        file_data=tuple(_decode_region(r) for r in d["regions"]),
        gnu_stack=gnu_stack,
        gnu_relro_regions=tuple(_decode_relro(r) for r in d["gnu_relro"]),
    )


def load_elf(data: bytes) -> Elf:
    """Decode snapshot bytes produced by dump_elf().

    Compressed snapshots are detected by the zstd frame magic.

    Raises:
        SnapshotError: If the bytes are not a valid snapshot
    """
    if data[:4] == ZSTD_MAGIC:
        try:
            data = zstd.ZstdDecompressor().decompress(data)
        except zstd.ZstdError as e:
            raise SnapshotError(f"Failed to decompress ELF model snapshot: {e}") from e

    try:
        doc = msgpack.unpackb(data, raw=False, strict_map_key=True)
    except (msgpack.exceptions.UnpackException, ValueError) as e:
        raise SnapshotError(f"Failed to parse ELF model snapshot: {e}") from e

    if not isinstance(doc, dict) or doc.get("format") != SNAPSHOT_FORMAT:
        raise SnapshotError("Not an ELF model snapshot")
    if doc.get("version") != SNAPSHOT_VERSION:
        raise SnapshotError(
            f"Unsupported snapshot version {doc.get('version')!r} "
            f"(expected {SNAPSHOT_VERSION})"
        )

    try:
        elf = _decode_elf(doc["elf"])
    except SnapshotError:
        raise
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise SnapshotError(f"Malformed ELF model snapshot: {e!r}") from e

    logger.debug(
        "Decoded ELF model snapshot with %d top-level regions", len(elf.file_data)
    )
    return elf
