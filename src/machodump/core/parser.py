import logging
from typing import List, Tuple

from .byte_source import ByteSource
from .constants import FAT_MAGICS, FAT_MAGIC_64, FAT_CIGAM_64
from .errors import UnknownFormatError
from .header_parser import HeaderParser
from .load_command_parser import LoadCommandParser
from .model import Arch, FatArch, FatHeader, Image

logger = logging.getLogger(__name__)


class MachOParser:
    """Разбор Mach-O образа или FAT-контейнера в неизменяемую модель Image"""

    def __init__(self, path: str):
        self.path = path

    def parse(self) -> Image:
        """Разбирает файл целиком; при ошибке частичный результат не возвращается"""
        with ByteSource.open(self.path) as source:
            header_parser = HeaderParser(source)
            command_parser = LoadCommandParser(source)

            magic, header, swap = header_parser.parse_header()
            if isinstance(header, FatHeader):
                sixty_four = magic in (FAT_MAGIC_64, FAT_CIGAM_64)
                archs = self._parse_fat_archs(header_parser, command_parser, header, sixty_four, swap)
            else:
                load_commands = command_parser.parse(header, swap)
                archs = (Arch(magic, header, load_commands),)

        logger.debug("%s: архитектур %d", self.path, len(archs))
        return Image(self.path, header, archs)

    def _parse_fat_archs(self, header_parser: HeaderParser, command_parser: LoadCommandParser,
                         header: FatHeader, sixty_four: bool, swap: bool) -> Tuple[Arch, ...]:
        """Обходит описатели архитектур по порядку.

        Для каждого описателя разбирается вложенный образ по его смещению,
        затем курсор возвращается к следующему описателю.
        """
        source = header_parser.source
        archs: List[Arch] = []
        for _ in range(header.nfat_arch):
            fat_arch = header_parser.parse_fat_arch(sixty_four, swap)
            next_descriptor = source.position()

            archs.append(self._parse_slice(header_parser, command_parser, fat_arch))

            source.seek(next_descriptor)
        return tuple(archs)

    def _parse_slice(self, header_parser: HeaderParser, command_parser: LoadCommandParser,
                     fat_arch: FatArch) -> Arch:
        magic, header, swap = header_parser.parse_header(fat_arch.offset)
        if magic in FAT_MAGICS:
            raise UnknownFormatError(magic, "Вложенный FAT-контейнер не поддерживается")
        load_commands = command_parser.parse(header, swap)
        return Arch(magic, header, load_commands, fat_arch)


def parse(path: str) -> Image:
    """Точка входа декодера: путь к файлу -> Image"""
    return MachOParser(path).parse()
