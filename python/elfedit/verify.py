"""
Structural validation of an ELF model.

The model does not check its invariants on construction. ElfModelVerifier
walks a finished Elf value and reports what a writer would trip over:
word values that overflow the class width, codes and indices that overflow
their fields, segment indices that are not a permutation of 0..n-1, bad
alignments, misordered symbol tables. Problems are reported, never raised.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Iterator

from .elf import Elf
from .regions import (
    ElfDataElfHeader,
    ElfDataGOT,
    ElfDataSection,
    ElfDataSectionHeaders,
    ElfDataSectionNameTable,
    ElfDataSegment,
    ElfDataSegmentHeaders,
    ElfDataStrtab,
    ElfDataSymtab,
)
from .enums import OpenEnum
from .symbols import STB_LOCAL, ElfSymbolTable
from .types import PT_LOAD

logger = logging.getLogger(__name__)


@dataclass
class VerificationResult:
    """Errors and warnings collected while checking a model."""

    passed: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, msg: str) -> None:
        """Add an error (verification failed)."""
        self.errors.append(msg)
        self.passed = False

    def add_warning(self, msg: str) -> None:
        """Add a warning (verification passed but with concerns)."""
        self.warnings.append(msg)

    def merge(self, other: "VerificationResult") -> None:
        """Merge another result into this one."""
        if not other.passed:
            self.passed = False
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)

    def __str__(self) -> str:
        """Human-readable summary."""
        lines = []
        if self.passed:
            lines.append("Verification PASSED")
        else:
            lines.append("Verification FAILED")

        if self.errors:
            lines.append(f"Errors ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"  - {e}")

        if self.warnings:
            lines.append(f"Warnings ({len(self.warnings)}):")
            for w in self.warnings:
                lines.append(f"  - {w}")

        return "\n".join(lines)


def _is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def _code_text(code: OpenEnum) -> str:
    # Codes may be out of range here; str(code) would reject negatives.
    return code.name or f"{code.code:#x}"


class ElfModelVerifier:
    """Invariant checks over an Elf model.

    Usage:
        result = ElfModelVerifier.verify(elf)
        if not result.passed:
            print(result)
    """

    def __init__(self, elf: Elf):
        self._elf = elf

    @classmethod
    def verify(cls, elf: Elf) -> VerificationResult:
        """Run every check against elf."""
        return cls(elf).run_all_checks()

    def run_all_checks(self) -> VerificationResult:
        """Run all structural checks."""
        result = VerificationResult()

        checks: list[Callable[[], VerificationResult]] = [
            self.check_word_widths,
            self.check_field_widths,
            self.check_segment_indices,
            self.check_segment_alignment,
            self.check_table_markers,
            self.check_section_indices,
            self.check_symbol_tables,
            self.check_relro_regions,
        ]
        for check in checks:
            check_result = check()
            if not check_result.passed:
                logger.debug(
                    "%s reported %d error(s)", check.__name__, len(check_result.errors)
                )
            result.merge(check_result)

        return result

    def _word_fields(self) -> Iterator[tuple[str, int]]:
        elf = self._elf
        yield "entry", elf.entry
        for seg in elf.segments():
            where = f"segment {seg.index}"
            yield f"{where} vaddr", seg.virt_addr
            yield f"{where} paddr", seg.phys_addr
            yield f"{where} align", seg.align
            yield f"{where} memsize", seg.mem_size.size
        for sec in elf.sections():
            where = f"section {sec.index} ({sec.display_name})"
            yield f"{where} addr", sec.addr
            yield f"{where} flags", sec.flags.value
            yield f"{where} size", sec.size
            yield f"{where} addralign", sec.addralign
            yield f"{where} entsize", sec.entsize
        for region in elf.iter_regions():
            if isinstance(region, ElfDataSymtab):
                for i, entry in enumerate(region.symtab.entries):
                    where = f"symtab {region.symtab.index} entry {i}"
                    yield f"{where} value", entry.value
                    yield f"{where} size", entry.size
        for relro in elf.gnu_relro_regions:
            where = f"relro segment {relro.segment_index}"
            yield f"{where} start", relro.addr_start
            yield f"{where} size", relro.size

    def check_word_widths(self) -> VerificationResult:
        """Check every word-valued field fits the class word type."""
        result = VerificationResult()
        word = self._elf.word_type

        for name, value in self._word_fields():
            if not word.fits(value):
                result.add_error(
                    f"{name} = {value:#x} does not fit a {word.bits}-bit word"
                )

        if not 0 <= self._elf.flags <= 0xFFFFFFFF:
            result.add_error(f"e_flags = {self._elf.flags:#x} does not fit 32 bits")

        return result

    def _fixed_fields(self) -> Iterator[tuple[str, int, int]]:
        elf = self._elf
        yield "osabi", elf.osabi.code, elf.osabi.BITS
        yield "abi version", elf.abi_version, 8
        yield "e_type", elf.type.code, elf.type.BITS
        yield "e_machine", elf.machine.code, elf.machine.BITS
        for seg in elf.segments():
            where = f"segment {seg.index}"
            yield f"{where} type", seg.type.code, seg.type.BITS
            yield f"{where} flags", seg.flags.value, seg.flags.BITS
            yield f"{where} index", seg.index, 16
        if elf.gnu_stack is not None:
            yield "gnu stack index", elf.gnu_stack.segment_index, 16
        for relro in elf.gnu_relro_regions:
            yield "relro index", relro.segment_index, 16
            yield "relro target index", relro.ref_segment_index, 16
        for sec in elf.sections():
            where = f"section {sec.index} ({sec.display_name})"
            yield f"{where} index", sec.index, 16
            yield f"{where} type", sec.type.code, sec.type.BITS
            yield f"{where} link", sec.link, 32
            yield f"{where} info", sec.info, 32
        for region in elf.iter_regions():
            if isinstance(region, (ElfDataStrtab, ElfDataSectionNameTable)):
                yield f"{type(region).__name__} index", region.index, 16
            elif isinstance(region, ElfDataSymtab):
                symtab = region.symtab
                yield f"symtab {symtab.index} index", symtab.index, 16
                for i, entry in enumerate(symtab.entries):
                    where = f"symtab {symtab.index} entry {i}"
                    # Type and binding share st_info, a nibble each.
                    yield f"{where} type", entry.type.code, 4
                    yield f"{where} binding", entry.bind.code, 4
                    yield f"{where} other", entry.other, 8
                    yield f"{where} section index", entry.index.code, 16

    def check_field_widths(self) -> VerificationResult:
        """Check codes, indices and packed fields fit their fixed widths."""
        result = VerificationResult()

        for name, value, bits in self._fixed_fields():
            if not 0 <= value < (1 << bits):
                result.add_error(f"{name} = {value:#x} does not fit {bits} bits")

        return result

    def check_segment_indices(self) -> VerificationResult:
        """Check program header indices are unique and span 0..n-1."""
        result = VerificationResult()
        elf = self._elf

        indices = [seg.index for seg in elf.segments()]
        if elf.gnu_stack is not None:
            indices.append(elf.gnu_stack.segment_index)
        indices.extend(r.segment_index for r in elf.gnu_relro_regions)

        counts = Counter(indices)
        for index, count in sorted(counts.items()):
            if count > 1:
                result.add_error(f"Segment index {index} used {count} times")

        expected = set(range(len(indices)))
        missing = sorted(expected - set(indices))
        extra = sorted(set(indices) - expected)
        if missing:
            result.add_error(f"Segment indices missing from table: {missing}")
        if extra:
            result.add_error(
                f"Segment indices out of range 0..{len(indices) - 1}: {extra}"
            )

        return result

    def check_segment_alignment(self) -> VerificationResult:
        """Check p_align is 0, 1 or a power of two."""
        result = VerificationResult()

        for seg in self._elf.segments():
            if seg.align > 1 and not _is_power_of_two(seg.align):
                result.add_error(
                    f"Segment {seg.index} ({_code_text(seg.type)}): "
                    f"alignment {seg.align} is not a power of two"
                )
            if seg.is_load and seg.align > 1 and seg.virt_addr != seg.phys_addr:
                result.add_warning(
                    f"Segment {seg.index}: paddr {seg.phys_addr:#x} differs "
                    f"from vaddr {seg.virt_addr:#x}"
                )

        return result

    def check_table_markers(self) -> VerificationResult:
        """Check header and table markers appear at most once."""
        result = VerificationResult()
        regions = list(self._elf.iter_regions())

        for marker, label in (
            (ElfDataElfHeader, "ELF header"),
            (ElfDataSegmentHeaders, "segment header table"),
            (ElfDataSectionHeaders, "section header table"),
        ):
            count = sum(1 for r in regions if isinstance(r, marker))
            if count > 1:
                result.add_error(f"{label} appears {count} times")

        header_positions = [
            i for i, r in enumerate(regions) if isinstance(r, ElfDataElfHeader)
        ]
        # Only enclosing segments may precede the header.
        if header_positions and any(
            not isinstance(r, ElfDataSegment) for r in regions[: header_positions[0]]
        ):
            result.add_warning("ELF header is not the first region in the file")

        return result

    def check_section_indices(self) -> VerificationResult:
        """Check no two section-bearing regions claim the same index."""
        result = VerificationResult()
        seen: dict[int, str] = {}

        for region in self._elf.iter_regions():
            if isinstance(region, ElfDataSection):
                entry = (region.section.index, region.section.display_name)
            elif isinstance(region, ElfDataGOT):
                entry = (region.got.index, "GOT")
            elif isinstance(region, ElfDataSymtab):
                entry = (region.symtab.index, "symtab")
            elif isinstance(region, ElfDataStrtab):
                entry = (region.index, "strtab")
            elif isinstance(region, ElfDataSectionNameTable):
                entry = (region.index, "section name table")
            else:
                continue

            index, label = entry
            if index in seen:
                result.add_error(
                    f"Section index {index} used by both {seen[index]} and {label}"
                )
            else:
                seen[index] = label

        return result

    def _check_symtab(self, symtab: ElfSymbolTable, result: VerificationResult) -> None:
        for i, entry in enumerate(symtab.local_symbols):
            if entry.bind != STB_LOCAL:
                result.add_error(
                    f"Symtab {symtab.index}: entry {i} is {_code_text(entry.bind)} "
                    f"inside the local range"
                )
        for i, entry in enumerate(symtab.global_symbols, start=symtab.local_entries):
            if entry.bind == STB_LOCAL:
                result.add_error(
                    f"Symtab {symtab.index}: local entry {i} follows global entries"
                )
        if symtab.entries and symtab.local_entries == 0:
            result.add_warning(f"Symtab {symtab.index}: first entry is not local")

    def check_symbol_tables(self) -> VerificationResult:
        """Check local symbols precede global ones."""
        result = VerificationResult()

        for region in self._elf.iter_regions():
            if isinstance(region, ElfDataSymtab):
                self._check_symtab(region.symtab, result)

        return result

    def check_relro_regions(self) -> VerificationResult:
        """Check relro regions refer to existing loadable segments."""
        result = VerificationResult()
        by_index = {seg.index: seg for seg in self._elf.segments()}

        for relro in self._elf.gnu_relro_regions:
            seg = by_index.get(relro.ref_segment_index)
            if seg is None:
                result.add_error(
                    f"Relro segment {relro.segment_index} refers to missing "
                    f"segment {relro.ref_segment_index}"
                )
            elif seg.type != PT_LOAD:
                result.add_warning(
                    f"Relro segment {relro.segment_index} refers to "
                    f"{_code_text(seg.type)} segment {seg.index}"
                )

        return result
