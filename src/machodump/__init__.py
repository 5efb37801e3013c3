"""Декодер Mach-O образов и FAT-контейнеров с отчётами в консоли."""

from .core.errors import FileAccessError, MachOError, ShortRead, UnknownFormatError
from .core.model import Arch, Image
from .core.parser import MachOParser, parse

__version__ = "1.0.0"

__all__ = [
    "Arch",
    "FileAccessError",
    "Image",
    "MachOError",
    "MachOParser",
    "ShortRead",
    "UnknownFormatError",
    "parse",
]
