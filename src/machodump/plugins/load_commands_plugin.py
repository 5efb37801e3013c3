from typing import List, Tuple

from machodump.core.formatting import (
    build_tool_name, format_source_version, format_version, platform_name,
    protection_string, section_flag_names, section_type_name,
)
from machodump.core.model import (
    Arch, BuildVersionCommand, DyldInfoCommand, DylibCommand, DylinkerCommand,
    DysymtabCommand, EntryPointCommand, LinkeditDataCommand, LoadCommand,
    Section, Section64, SegmentCommand, SourceVersionCommand, SymtabCommand,
    ThreadCommand, UnknownCommand, UuidCommand, VersionMinCommand,
)
from machodump.core.plugin_base import ReportPlugin

Rows = List[Tuple[str, object]]

# Сколько байт неизвестной команды показывать
UNKNOWN_PREVIEW_BYTES = 32

DYLD_INFO_FIELDS = (
    "rebase_off", "rebase_size", "bind_off", "bind_size", "weak_bind_off",
    "weak_bind_size", "lazy_bind_off", "lazy_bind_size", "export_off", "export_size",
)

DYSYMTAB_FIELDS = (
    "ilocalsym", "nlocalsym", "iextdefsym", "nextdefsym", "iundefsym", "nundefsym",
    "tocoff", "ntoc", "modtaboff", "nmodtab", "extrefsymoff", "nextrefsyms",
    "indirectsymoff", "nindirectsyms", "extreloff", "nextrel", "locreloff", "nlocrel",
)


class LoadCommandsPlugin(ReportPlugin):
    """Плагин вывода команд загрузки каждой архитектуры"""

    @staticmethod
    def get_name() -> str:
        return "load_commands"

    @staticmethod
    def get_description() -> str:
        return "Команды загрузки, сегменты и секции"

    def render(self) -> None:
        if self.image.is_fat:
            for index, arch in enumerate(self.image.archs):
                self.print_section(f"Load commands for Arch {index}")
                self._print_load_commands(arch)
        else:
            self.print_section("Load commands")
            self._print_load_commands(self.image.archs[0])

    def _print_load_commands(self, arch: Arch) -> None:
        for index, command in enumerate(arch.load_commands):
            self.print_fields(f"Load command {index}", self.command_rows(command))
            if isinstance(command, SegmentCommand):
                for section in command.sections:
                    self.print_fields("Section", self.section_rows(section))

    @staticmethod
    def command_rows(command: LoadCommand) -> Rows:
        """Поля команды загрузки для вывода"""
        rows: Rows = [("cmd", command.command_name), ("cmdsize", command.cmdsize)]

        if isinstance(command, SegmentCommand):
            rows += [
                ("segname", command.segment_name),
                ("vmaddr", f"0x{command.vmaddr:x}"),
                ("vmsize", f"0x{command.vmsize:x}"),
                ("fileoff", command.fileoff),
                ("filesize", command.filesize),
                ("maxprot", f"0x{command.maxprot & 0xffffffff:x} ({protection_string(command.maxprot)})"),
                ("initprot", f"0x{command.initprot & 0xffffffff:x} ({protection_string(command.initprot)})"),
                ("nsects", command.nsects),
                ("flags", f"0x{command.flags:x}"),
            ]
        elif isinstance(command, UuidCommand):
            rows.append(("uuid", command.uuid_string))
        elif isinstance(command, DylibCommand):
            rows += [
                ("name", f"{command.name} (offset {command.name_offset})"),
                ("time stamp", command.timestamp),
                ("current version", format_version(command.current_version)),
                ("compatibility version", format_version(command.compatibility_version)),
            ]
        elif isinstance(command, DylinkerCommand):
            rows.append(("name", f"{command.name} (offset {command.name_offset})"))
        elif isinstance(command, DyldInfoCommand):
            rows += [(field, getattr(command, field)) for field in DYLD_INFO_FIELDS]
        elif isinstance(command, SymtabCommand):
            rows += [
                ("symoff", command.symoff),
                ("nsyms", command.nsyms),
                ("stroff", command.stroff),
                ("strsize", command.strsize),
            ]
        elif isinstance(command, DysymtabCommand):
            rows += [(field, getattr(command, field)) for field in DYSYMTAB_FIELDS]
        elif isinstance(command, VersionMinCommand):
            rows += [
                ("version", format_version(command.version)),
                ("sdk", format_version(command.sdk)),
            ]
        elif isinstance(command, SourceVersionCommand):
            rows.append(("version", format_source_version(command.version)))
        elif isinstance(command, EntryPointCommand):
            rows += [("entryoff", command.entryoff), ("stacksize", command.stacksize)]
        elif isinstance(command, LinkeditDataCommand):
            rows += [("dataoff", command.dataoff), ("datasize", command.datasize)]
        elif isinstance(command, ThreadCommand):
            rows += [("flavor", command.flavor), ("count", command.count)]
        elif isinstance(command, BuildVersionCommand):
            rows += [
                ("platform", f"{command.platform} ({platform_name(command.platform)})"),
                ("minos", format_version(command.minos)),
                ("sdk", format_version(command.sdk)),
                ("ntools", command.ntools),
            ]
            for tool in command.tools:
                rows.append(("tool", f"{build_tool_name(tool.tool)} {format_version(tool.version)}"))
        elif isinstance(command, UnknownCommand):
            preview = command.data[:UNKNOWN_PREVIEW_BYTES].hex()
            if len(command.data) > UNKNOWN_PREVIEW_BYTES:
                preview += "..."
            rows.append(("data", preview))
        return rows

    @staticmethod
    def section_rows(section: Section) -> Rows:
        """Поля секции для вывода"""
        rows: Rows = [
            ("sectname", section.name),
            ("segname", section.segment_name),
            ("addr", f"0x{section.addr:x}"),
            ("size", f"0x{section.size:x}"),
            ("offset", section.offset),
            ("align", f"2^{section.align}"),
            ("reloff", section.reloff),
            ("nreloc", section.nreloc),
            ("type", section_type_name(section.type)),
            ("attributes", " ".join(section_flag_names(section.flags)) or "-"),
            ("reserved1", f"{section.reserved1} (index into indirect symbol table)"),
            ("reserved2", section.reserved2),
        ]
        if isinstance(section, Section64):
            rows.append(("reserved3", section.reserved3))
        return rows
