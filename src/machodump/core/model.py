import uuid
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Tuple, Union

from .constants import (
    LC_SEGMENT, LC_SEGMENT_64, LC_UUID, LC_DYLD_INFO_ONLY, LC_SYMTAB,
    LC_DYSYMTAB, LC_LOAD_DYLINKER, LC_VERSION_MIN_MACOSX, LC_SOURCE_VERSION,
    LC_MAIN, LC_LOAD_DYLIB, LC_LOAD_WEAK_DYLIB, LC_FUNCTION_STARTS,
    LC_DATA_IN_CODE, LC_UNIXTHREAD, LC_CODE_SIGNATURE, LC_BUILD_VERSION,
    SECTION_TYPE, SECTION_ATTRIBUTES,
)
from .endian import fixed_string, normalize


class LoadCommandKind(Enum):
    """Известные типы команд загрузки"""
    SEGMENT = LC_SEGMENT
    SEGMENT_64 = LC_SEGMENT_64
    UUID = LC_UUID
    DYLD_INFO_ONLY = LC_DYLD_INFO_ONLY
    SYMTAB = LC_SYMTAB
    DYSYMTAB = LC_DYSYMTAB
    LOAD_DYLINKER = LC_LOAD_DYLINKER
    VERSION_MIN_MACOSX = LC_VERSION_MIN_MACOSX
    SOURCE_VERSION = LC_SOURCE_VERSION
    MAIN = LC_MAIN
    LOAD_DYLIB = LC_LOAD_DYLIB
    LOAD_WEAK_DYLIB = LC_LOAD_WEAK_DYLIB
    FUNCTION_STARTS = LC_FUNCTION_STARTS
    DATA_IN_CODE = LC_DATA_IN_CODE
    UNIXTHREAD = LC_UNIXTHREAD
    CODE_SIGNATURE = LC_CODE_SIGNATURE
    BUILD_VERSION = LC_BUILD_VERSION

    @classmethod
    def from_tag(cls, tag: int) -> Optional["LoadCommandKind"]:
        try:
            return cls(tag)
        except ValueError:
            return None

    @property
    def command_name(self) -> str:
        return f"LC_{self.name}"


# Заголовки

@dataclass(frozen=True)
class MachHeader:
    """Заголовок 32-битного Mach-O образа"""
    magic: int
    cputype: int
    cpusubtype: int
    filetype: int
    ncmds: int
    sizeofcmds: int
    flags: int

    is_64_bit: ClassVar[bool] = False


@dataclass(frozen=True)
class MachHeader64(MachHeader):
    """Заголовок 64-битного Mach-O образа"""
    reserved: int

    is_64_bit: ClassVar[bool] = True


@dataclass(frozen=True)
class FatHeader:
    """Заголовок FAT-контейнера"""
    magic: int
    nfat_arch: int

    is_64_bit: ClassVar[bool] = False


HeaderVariant = Union[MachHeader, MachHeader64, FatHeader]


@dataclass(frozen=True)
class FatArch:
    """Описатель архитектуры внутри FAT-контейнера"""
    cputype: int
    cpusubtype: int
    offset: int
    size: int
    align: int

    is_64_bit: ClassVar[bool] = False


@dataclass(frozen=True)
class FatArch64(FatArch):
    reserved: int

    is_64_bit: ClassVar[bool] = True


# Секции

@dataclass(frozen=True)
class Section:
    """Секция 32-битного сегмента.

    sectname и segname хранятся так, как лежат в нормализованном блоке
    команд; для чтения используйте name и segment_name.
    """
    sectname: bytes
    segname: bytes
    addr: int
    size: int
    offset: int
    align: int
    reloff: int
    nreloc: int
    flags: int
    reserved1: int
    reserved2: int
    swap: bool

    @property
    def name(self) -> str:
        return fixed_string(self.sectname, self.swap)

    @property
    def segment_name(self) -> str:
        return fixed_string(self.segname, self.swap)

    @property
    def type(self) -> int:
        return self.flags & SECTION_TYPE

    @property
    def attributes(self) -> int:
        return self.flags & SECTION_ATTRIBUTES


@dataclass(frozen=True)
class Section64(Section):
    """Секция 64-битного сегмента"""
    reserved3: int


# Команды загрузки

@dataclass(frozen=True)
class LoadCommand:
    """Общая часть любой команды загрузки.

    swap - флаг перестановки байт архитектуры, нужен для повторной
    нормализации упакованных символьных полей.
    """
    cmd: int
    cmdsize: int
    swap: bool

    @property
    def kind(self) -> Optional[LoadCommandKind]:
        return LoadCommandKind.from_tag(self.cmd)

    @property
    def command_name(self) -> str:
        kind = self.kind
        if kind is None:
            return f"UNKNOWN (0x{self.cmd:x})"
        return kind.command_name


@dataclass(frozen=True)
class SegmentCommand(LoadCommand):
    """LC_SEGMENT вместе с секциями"""
    segname: bytes
    vmaddr: int
    vmsize: int
    fileoff: int
    filesize: int
    maxprot: int
    initprot: int
    nsects: int
    flags: int
    sections: Tuple[Section, ...]

    @property
    def segment_name(self) -> str:
        return fixed_string(self.segname, self.swap)


@dataclass(frozen=True)
class SegmentCommand64(SegmentCommand):
    """LC_SEGMENT_64 вместе с секциями"""


@dataclass(frozen=True)
class UuidCommand(LoadCommand):
    uuid: bytes

    @property
    def uuid_string(self) -> str:
        """UUID в виде XXXXXXXX-XXXX-XXXX-XXXX-XXXXXXXXXXXX"""
        return str(uuid.UUID(bytes=normalize(self.uuid, self.swap))).upper()


@dataclass(frozen=True)
class DyldInfoCommand(LoadCommand):
    rebase_off: int
    rebase_size: int
    bind_off: int
    bind_size: int
    weak_bind_off: int
    weak_bind_size: int
    lazy_bind_off: int
    lazy_bind_size: int
    export_off: int
    export_size: int


@dataclass(frozen=True)
class SymtabCommand(LoadCommand):
    symoff: int
    nsyms: int
    stroff: int
    strsize: int


@dataclass(frozen=True)
class DysymtabCommand(LoadCommand):
    ilocalsym: int
    nlocalsym: int
    iextdefsym: int
    nextdefsym: int
    iundefsym: int
    nundefsym: int
    tocoff: int
    ntoc: int
    modtaboff: int
    nmodtab: int
    extrefsymoff: int
    nextrefsyms: int
    indirectsymoff: int
    nindirectsyms: int
    extreloff: int
    nextrel: int
    locreloff: int
    nlocrel: int


@dataclass(frozen=True)
class DylinkerCommand(LoadCommand):
    """LC_LOAD_DYLINKER; name_offset отсчитывается от начала команды"""
    name_offset: int
    name: str


@dataclass(frozen=True)
class VersionMinCommand(LoadCommand):
    version: int
    sdk: int


@dataclass(frozen=True)
class SourceVersionCommand(LoadCommand):
    version: int


@dataclass(frozen=True)
class EntryPointCommand(LoadCommand):
    entryoff: int
    stacksize: int


@dataclass(frozen=True)
class DylibCommand(LoadCommand):
    """LC_LOAD_DYLIB и LC_LOAD_WEAK_DYLIB"""
    name_offset: int
    timestamp: int
    current_version: int
    compatibility_version: int
    name: str


@dataclass(frozen=True)
class LinkeditDataCommand(LoadCommand):
    """LC_FUNCTION_STARTS, LC_DATA_IN_CODE и LC_CODE_SIGNATURE"""
    dataoff: int
    datasize: int


@dataclass(frozen=True)
class ThreadCommand(LoadCommand):
    flavor: int
    count: int


@dataclass(frozen=True)
class BuildToolVersion:
    tool: int
    version: int


@dataclass(frozen=True)
class BuildVersionCommand(LoadCommand):
    platform: int
    minos: int
    sdk: int
    ntools: int
    tools: Tuple[BuildToolVersion, ...]


@dataclass(frozen=True)
class UnknownCommand(LoadCommand):
    """Команда с неизвестным тегом, сохраняется как есть"""
    data: bytes


# Образ

@dataclass(frozen=True)
class Arch:
    """Одна архитектура образа"""
    magic: int
    header: HeaderVariant
    load_commands: Tuple[LoadCommand, ...]
    fat_arch: Optional[FatArch] = None


@dataclass(frozen=True)
class Image:
    """Результат разбора файла"""
    path: str
    header: HeaderVariant
    archs: Tuple[Arch, ...]

    @property
    def is_fat(self) -> bool:
        return isinstance(self.header, FatHeader)
