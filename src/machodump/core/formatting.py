import sys
from typing import List, Optional, Tuple

from .constants import (
    CPU_TYPES, CPU_TYPE_NAMES, CPU_SUBTYPE_MASK, FILE_TYPES, HEADER_FLAGS,
    MAGIC_NAMES, SECTION_TYPES, SECTION_FLAGS, PLATFORMS, BUILD_TOOLS,
    VM_PROT_READ, VM_PROT_WRITE, VM_PROT_EXECUTE,
    MH_MAGIC, MH_CIGAM, MH_MAGIC_64, MH_CIGAM_64,
    FAT_MAGIC, FAT_CIGAM, FAT_MAGIC_64, FAT_CIGAM_64,
)
from .model import Arch, FatHeader, Image

# MH_MAGIC означает порядок байт хоста, MH_CIGAM - обратный
_NATIVE = "Little Endian" if sys.byteorder == "little" else "Big Endian"
_OPPOSITE = "Big Endian" if sys.byteorder == "little" else "Little Endian"

ARCH_TYPES = {
    MH_MAGIC: _NATIVE,
    MH_MAGIC_64: f"{_NATIVE}, 64",
    MH_CIGAM: _OPPOSITE,
    MH_CIGAM_64: f"{_OPPOSITE}, 64",
    FAT_MAGIC: f"{_NATIVE} FAT Archive",
    FAT_MAGIC_64: f"{_NATIVE} FAT Archive, 64",
    FAT_CIGAM: f"{_OPPOSITE} FAT Archive",
    FAT_CIGAM_64: f"{_OPPOSITE} FAT Archive, 64",
}


def cpu_type_name(cputype: int) -> str:
    """Имя типа CPU"""
    name = CPU_TYPES.get(cputype) or CPU_TYPE_NAMES.get(cputype)
    return name if name else f"Unknown ({cputype})"


def split_cpusubtype(cpusubtype: int) -> Tuple[int, int]:
    """Разделяет cpusubtype на (подтип, capabilities)"""
    value = cpusubtype & 0xffffffff
    return value & ~CPU_SUBTYPE_MASK, (value & CPU_SUBTYPE_MASK) >> 24


def file_type_name(filetype: int) -> str:
    return FILE_TYPES.get(filetype, f"Unknown ({filetype})")


def magic_name(magic: int) -> str:
    return MAGIC_NAMES.get(magic, f"Unknown (0x{magic:x})")


def header_flag_names(flags: int) -> List[str]:
    """Получить список флагов заголовка"""
    return [name for bit, name in HEADER_FLAGS if flags & bit]


def protection_string(prot: int) -> str:
    r = "r" if prot & VM_PROT_READ else "-"
    w = "w" if prot & VM_PROT_WRITE else "-"
    x = "x" if prot & VM_PROT_EXECUTE else "-"
    return f"{r}{w}{x}"


def section_type_name(section_type: int) -> str:
    return SECTION_TYPES.get(section_type, f"Unknown ({section_type})")


def section_flag_names(flags: int) -> List[str]:
    return [name for bit, name in SECTION_FLAGS if flags & bit]


def format_version(version: int) -> str:
    """Версия в формате X.Y.Z (nibbles xxxx.yy.zz)"""
    return f"{version >> 16}.{(version >> 8) & 0xff}.{version & 0xff}"


def format_source_version(version: int) -> str:
    """Версия исходников в формате A.B.C.D.E (a24.b10.c10.d10.e10)"""
    a = version >> 40
    b = (version >> 30) & 0x3ff
    c = (version >> 20) & 0x3ff
    d = (version >> 10) & 0x3ff
    e = version & 0x3ff
    return f"{a}.{b}.{c}.{d}.{e}"


def platform_name(platform: int) -> str:
    return PLATFORMS.get(platform, f"Unknown ({platform})")


def build_tool_name(tool: int) -> str:
    return BUILD_TOOLS.get(tool, f"Unknown ({tool})")


def arch_cpu_name(arch: Arch) -> Optional[str]:
    if isinstance(arch.header, FatHeader):
        return None
    return cpu_type_name(arch.header.cputype)


def describe_arch(arch: Arch) -> str:
    """Краткое описание архитектуры: порядок байт, разрядность, CPU"""
    arch_type = ARCH_TYPES.get(arch.magic, "Unknown")
    cpu_name = arch_cpu_name(arch)
    if cpu_name:
        return f"{arch_type}, {cpu_name}"
    return arch_type


def describe_image(image: Image) -> str:
    """Сводка по образу"""
    image_type = "FAT Image" if image.is_fat else "Single Image"
    output = f"Image<{image.path}>: {image_type}"
    if not image.is_fat:
        return f"{output}, {describe_arch(image.archs[0])}"
    for index, arch in enumerate(image.archs):
        output += f"\nArch {index}: {describe_arch(arch)}"
    return output
