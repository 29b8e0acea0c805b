import pytest

from elfedit import (
    ELFCLASS32,
    ELFCLASS64,
    ELFDATA2LSB,
    ELFDATA2MSB,
    EM_386,
    EM_X86_64,
    ET_DYN,
    ET_EXEC,
    Elf,
    empty_elf,
)
from model_test_utils import nested_raw_elf, sample_executable


@pytest.fixture
def elf64() -> Elf:
    """An empty 64-bit little-endian x86-64 executable."""
    return empty_elf(ELFDATA2LSB, ELFCLASS64, ET_EXEC, EM_X86_64)


@pytest.fixture
def elf32() -> Elf:
    """An empty 32-bit big-endian shared object."""
    return empty_elf(ELFDATA2MSB, ELFCLASS32, ET_DYN, EM_386)


@pytest.fixture
def sample_elf() -> Elf:
    """A populated executable model; see model_test_utils.sample_executable."""
    return sample_executable()


@pytest.fixture
def nested_elf() -> Elf:
    """Two levels of nested segments followed by a top-level raw region."""
    return nested_raw_elf()
