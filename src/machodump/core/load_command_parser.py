import logging
from typing import Callable, Dict, List, Tuple

from .byte_source import ByteSource
from .constants import (
    LC_SEGMENT, LC_SEGMENT_64, LC_UUID, LC_DYLD_INFO_ONLY, LC_SYMTAB,
    LC_DYSYMTAB, LC_LOAD_DYLINKER, LC_VERSION_MIN_MACOSX, LC_SOURCE_VERSION,
    LC_MAIN, LC_LOAD_DYLIB, LC_LOAD_WEAK_DYLIB, LC_FUNCTION_STARTS,
    LC_DATA_IN_CODE, LC_UNIXTHREAD, LC_CODE_SIGNATURE, LC_BUILD_VERSION,
)
from .endian import normalize, record_size, unpack_record
from .errors import ShortRead
from .model import (
    BuildToolVersion, BuildVersionCommand, DyldInfoCommand, DylibCommand,
    DylinkerCommand, DysymtabCommand, EntryPointCommand, LinkeditDataCommand,
    LoadCommand, MachHeader, Section, Section64, SegmentCommand,
    SegmentCommand64, SourceVersionCommand, SymtabCommand, ThreadCommand,
    UnknownCommand, UuidCommand, VersionMinCommand,
)

logger = logging.getLogger(__name__)

# Все форматы начинаются с общей пары (cmd, cmdsize)
LOAD_COMMAND_FORMAT = 'II'
SEGMENT_FORMAT = 'II16sIIIIiiII'
SEGMENT_64_FORMAT = 'II16sQQQQiiII'
SECTION_FORMAT = '16s16sIIIIIIIII'
SECTION_64_FORMAT = '16s16sQQIIIIIIII'
UUID_FORMAT = 'II16s'
DYLD_INFO_FORMAT = 'II10I'
SYMTAB_FORMAT = 'IIIIII'
DYSYMTAB_FORMAT = 'II18I'
DYLINKER_FORMAT = 'III'
VERSION_MIN_FORMAT = 'IIII'
SOURCE_VERSION_FORMAT = 'IIQ'
ENTRY_POINT_FORMAT = 'IIQQ'
DYLIB_FORMAT = 'IIIIII'
LINKEDIT_DATA_FORMAT = 'IIII'
THREAD_FORMAT = 'IIII'
BUILD_VERSION_FORMAT = 'IIIIII'
BUILD_TOOL_VERSION_FORMAT = 'II'


class LoadCommandParser:
    """Разбор таблицы команд загрузки одной архитектуры.

    Весь блок sizeofcmds читается и нормализуется один раз, дальше записи
    вырезаются из него по смещениям. cmdsize не сверяется с размером
    структуры: испорченный cmdsize сдвигает все последующие записи.
    """

    def __init__(self, source: ByteSource):
        self.source = source
        self._decoders: Dict[int, Callable[[bytes, int, int, int, bool], LoadCommand]] = {
            LC_SEGMENT: self._parse_segment,
            LC_SEGMENT_64: self._parse_segment_64,
            LC_UUID: self._parse_uuid,
            LC_DYLD_INFO_ONLY: self._parse_dyld_info,
            LC_SYMTAB: self._parse_symtab,
            LC_DYSYMTAB: self._parse_dysymtab,
            LC_LOAD_DYLINKER: self._parse_dylinker,
            LC_VERSION_MIN_MACOSX: self._parse_version_min,
            LC_SOURCE_VERSION: self._parse_source_version,
            LC_MAIN: self._parse_entry_point,
            LC_LOAD_DYLIB: self._parse_dylib,
            LC_LOAD_WEAK_DYLIB: self._parse_dylib,
            LC_FUNCTION_STARTS: self._parse_linkedit_data,
            LC_DATA_IN_CODE: self._parse_linkedit_data,
            LC_UNIXTHREAD: self._parse_thread,
            LC_CODE_SIGNATURE: self._parse_linkedit_data,
            LC_BUILD_VERSION: self._parse_build_version,
        }

    def parse(self, header: MachHeader, swap: bool) -> Tuple[LoadCommand, ...]:
        """Читает ncmds команд из блока sizeofcmds с текущей позиции"""
        data = normalize(self.source.read(header.sizeofcmds), swap)

        commands: List[LoadCommand] = []
        offset = 0
        for _ in range(header.ncmds):
            cmd, cmdsize = self._unpack(LOAD_COMMAND_FORMAT, data, offset, swap)
            decoder = self._decoders.get(cmd, self._parse_unknown)
            logger.debug("Команда 0x%x, cmdsize=%d, смещение %d", cmd, cmdsize, offset)
            commands.append(decoder(data, offset, cmd, cmdsize, swap))
            offset += cmdsize

        if offset != header.sizeofcmds:
            logger.warning(
                "Сумма cmdsize (%d) не совпадает с sizeofcmds (%d)", offset, header.sizeofcmds
            )
        return tuple(commands)

    @staticmethod
    def _unpack(fmt: str, data: bytes, offset: int, swap: bool) -> Tuple:
        size = record_size(fmt)
        if offset < 0 or offset + size > len(data):
            raise ShortRead(size, max(0, len(data) - offset), "запись команды загрузки")
        return unpack_record(fmt, data, offset, swap)

    @staticmethod
    def _string(data: bytes, offset: int, cmdsize: int, name_offset: int, swap: bool) -> str:
        """Строка по смещению lc_str от начала команды до NUL или конца команды"""
        start = offset + name_offset
        end = min(offset + cmdsize, len(data))
        if start >= end:
            return ""
        # Подблок нормализуется повторно, как и символьные поля
        raw = normalize(data[start:end], swap)
        terminator = raw.find(b'\x00')
        if terminator != -1:
            raw = raw[:terminator]
        return raw.decode('utf-8', errors='replace')

    def _section_records(self, data: bytes, first: int, nsects: int, fmt: str, swap: bool) -> List[Tuple]:
        """Записи секций идут сразу за фиксированной частью сегмента"""
        stride = record_size(fmt)
        return [self._unpack(fmt, data, first + index * stride, swap) for index in range(nsects)]

    def _parse_segment(self, data, offset, cmd, cmdsize, swap):
        fields = self._unpack(SEGMENT_FORMAT, data, offset, swap)
        nsects = fields[9]
        records = self._section_records(data, offset + record_size(SEGMENT_FORMAT), nsects, SECTION_FORMAT, swap)
        sections = tuple(Section(*record, swap=swap) for record in records)
        return SegmentCommand(*fields[:2], swap, *fields[2:], sections=sections)

    def _parse_segment_64(self, data, offset, cmd, cmdsize, swap):
        fields = self._unpack(SEGMENT_64_FORMAT, data, offset, swap)
        nsects = fields[9]
        records = self._section_records(data, offset + record_size(SEGMENT_64_FORMAT), nsects, SECTION_64_FORMAT, swap)
        sections = tuple(
            Section64(*record[:11], swap=swap, reserved3=record[11]) for record in records
        )
        return SegmentCommand64(*fields[:2], swap, *fields[2:], sections=sections)

    def _parse_uuid(self, data, offset, cmd, cmdsize, swap):
        cmd, cmdsize, raw_uuid = self._unpack(UUID_FORMAT, data, offset, swap)
        return UuidCommand(cmd, cmdsize, swap, raw_uuid)

    def _parse_dyld_info(self, data, offset, cmd, cmdsize, swap):
        fields = self._unpack(DYLD_INFO_FORMAT, data, offset, swap)
        return DyldInfoCommand(*fields[:2], swap, *fields[2:])

    def _parse_symtab(self, data, offset, cmd, cmdsize, swap):
        fields = self._unpack(SYMTAB_FORMAT, data, offset, swap)
        return SymtabCommand(*fields[:2], swap, *fields[2:])

    def _parse_dysymtab(self, data, offset, cmd, cmdsize, swap):
        fields = self._unpack(DYSYMTAB_FORMAT, data, offset, swap)
        return DysymtabCommand(*fields[:2], swap, *fields[2:])

    def _parse_dylinker(self, data, offset, cmd, cmdsize, swap):
        cmd, cmdsize, name_offset = self._unpack(DYLINKER_FORMAT, data, offset, swap)
        name = self._string(data, offset, cmdsize, name_offset, swap)
        return DylinkerCommand(cmd, cmdsize, swap, name_offset, name)

    def _parse_version_min(self, data, offset, cmd, cmdsize, swap):
        fields = self._unpack(VERSION_MIN_FORMAT, data, offset, swap)
        return VersionMinCommand(*fields[:2], swap, *fields[2:])

    def _parse_source_version(self, data, offset, cmd, cmdsize, swap):
        fields = self._unpack(SOURCE_VERSION_FORMAT, data, offset, swap)
        return SourceVersionCommand(*fields[:2], swap, *fields[2:])

    def _parse_entry_point(self, data, offset, cmd, cmdsize, swap):
        fields = self._unpack(ENTRY_POINT_FORMAT, data, offset, swap)
        return EntryPointCommand(*fields[:2], swap, *fields[2:])

    def _parse_dylib(self, data, offset, cmd, cmdsize, swap):
        cmd, cmdsize, name_offset, timestamp, current, compatibility = self._unpack(
            DYLIB_FORMAT, data, offset, swap
        )
        name = self._string(data, offset, cmdsize, name_offset, swap)
        return DylibCommand(cmd, cmdsize, swap, name_offset, timestamp, current, compatibility, name)

    def _parse_linkedit_data(self, data, offset, cmd, cmdsize, swap):
        fields = self._unpack(LINKEDIT_DATA_FORMAT, data, offset, swap)
        return LinkeditDataCommand(*fields[:2], swap, *fields[2:])

    def _parse_thread(self, data, offset, cmd, cmdsize, swap):
        fields = self._unpack(THREAD_FORMAT, data, offset, swap)
        return ThreadCommand(*fields[:2], swap, *fields[2:])

    def _parse_build_version(self, data, offset, cmd, cmdsize, swap):
        fields = self._unpack(BUILD_VERSION_FORMAT, data, offset, swap)
        ntools = fields[5]
        first = offset + record_size(BUILD_VERSION_FORMAT)
        stride = record_size(BUILD_TOOL_VERSION_FORMAT)
        tools = tuple(
            BuildToolVersion(*self._unpack(BUILD_TOOL_VERSION_FORMAT, data, first + index * stride, swap))
            for index in range(ntools)
        )
        return BuildVersionCommand(*fields[:2], swap, *fields[2:], tools=tools)

    def _parse_unknown(self, data, offset, cmd, cmdsize, swap):
        end = offset + cmdsize
        if end > len(data):
            raise ShortRead(cmdsize, len(data) - offset, f"команда загрузки 0x{cmd:x}")
        return UnknownCommand(cmd, cmdsize, swap, bytes(data[offset:end]))
