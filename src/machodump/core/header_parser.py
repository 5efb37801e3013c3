import logging
import struct
from typing import Tuple

from .byte_source import ByteSource
from .constants import (
    MH_MAGIC, MH_CIGAM, MH_MAGIC_64, MH_CIGAM_64,
    FAT_MAGIC, FAT_CIGAM, FAT_MAGIC_64, FAT_CIGAM_64,
    SWAPPED_MAGICS, MAGIC_NAMES,
)
from .endian import normalize, record_size, unpack_record
from .errors import UnknownFormatError
from .model import FatArch, FatArch64, FatHeader, HeaderVariant, MachHeader, MachHeader64

logger = logging.getLogger(__name__)

MACH_HEADER_FORMAT = 'IiiIIII'
MACH_HEADER_64_FORMAT = 'IiiIIIII'
FAT_HEADER_FORMAT = 'II'
FAT_ARCH_FORMAT = 'iiIII'
FAT_ARCH_64_FORMAT = 'iiQQII'

# magic -> (формат записи, класс заголовка)
HEADER_LAYOUTS = {
    MH_MAGIC: (MACH_HEADER_FORMAT, MachHeader),
    MH_CIGAM: (MACH_HEADER_FORMAT, MachHeader),
    MH_MAGIC_64: (MACH_HEADER_64_FORMAT, MachHeader64),
    MH_CIGAM_64: (MACH_HEADER_64_FORMAT, MachHeader64),
    FAT_MAGIC: (FAT_HEADER_FORMAT, FatHeader),
    FAT_CIGAM: (FAT_HEADER_FORMAT, FatHeader),
    FAT_MAGIC_64: (FAT_HEADER_FORMAT, FatHeader),
    FAT_CIGAM_64: (FAT_HEADER_FORMAT, FatHeader),
}


class HeaderParser:
    """Классификация и разбор заголовков Mach-O и FAT"""

    def __init__(self, source: ByteSource):
        self.source = source

    def _read_record(self, fmt: str, swap: bool) -> Tuple:
        data = normalize(self.source.read(record_size(fmt)), swap)
        return unpack_record(fmt, data, 0, swap)

    def parse_header(self, start_offset: int = 0) -> Tuple[int, HeaderVariant, bool]:
        """Определяет формат по magic и читает заголовок целиком.

        Возвращает (magic, заголовок, swap). Курсор остаётся сразу
        за заголовком.
        """
        self.source.seek(start_offset)
        magic, = struct.unpack('=I', self.source.read(4))

        layout = HEADER_LAYOUTS.get(magic)
        if layout is None:
            raise UnknownFormatError(magic)
        fmt, header_cls = layout
        swap = magic in SWAPPED_MAGICS
        logger.debug("Смещение %d: %s, swap=%s", start_offset, MAGIC_NAMES[magic], swap)

        self.source.seek(start_offset)
        header = header_cls(*self._read_record(fmt, swap))
        return magic, header, swap

    def parse_fat_arch(self, sixty_four: bool, swap: bool) -> FatArch:
        """Читает очередной описатель архитектуры с текущей позиции"""
        if sixty_four:
            arch = FatArch64(*self._read_record(FAT_ARCH_64_FORMAT, swap))
        else:
            arch = FatArch(*self._read_record(FAT_ARCH_FORMAT, swap))
        logger.debug("FAT arch: cputype=%d offset=%d size=%d", arch.cputype, arch.offset, arch.size)
        return arch
