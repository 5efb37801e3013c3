from typing import List, Tuple

from machodump.core.formatting import (
    cpu_type_name, file_type_name, header_flag_names, magic_name, split_cpusubtype,
)
from machodump.core.model import FatArch64, FatHeader, MachHeader
from machodump.core.plugin_base import ReportPlugin


class MachHeaderPlugin(ReportPlugin):
    """Плагин вывода заголовка Mach-O или FAT"""

    @staticmethod
    def get_name() -> str:
        return "mach_header"

    @staticmethod
    def get_description() -> str:
        return "Заголовок Mach-O образа или FAT-контейнера"

    def render(self) -> None:
        self.print_section("Mach header")
        header = self.image.header
        if isinstance(header, FatHeader):
            self._print_fat_header(header)
            for index, arch in enumerate(self.image.archs):
                self._print_mach_header(arch.header, f"Arch {index}")
        else:
            self._print_mach_header(header, "Mach header")

    def _header_rows(self, header: MachHeader) -> List[Tuple[str, object]]:
        subtype, caps = split_cpusubtype(header.cpusubtype)
        flags = header_flag_names(header.flags)
        rows = [
            ("magic", f"0x{header.magic:x} ({magic_name(header.magic)})"),
            ("cputype", f"{header.cputype} ({cpu_type_name(header.cputype)})"),
            ("cpusubtype", subtype),
            ("caps", f"0x{caps:02x}"),
            ("filetype", f"{header.filetype} ({file_type_name(header.filetype)})"),
            ("ncmds", header.ncmds),
            ("sizeofcmds", header.sizeofcmds),
            ("flags", f"0x{header.flags:x}"),
        ]
        if flags:
            rows.append(("", " ".join(flags)))
        if header.is_64_bit:
            rows.append(("reserved", header.reserved))
        return rows

    def _print_mach_header(self, header: MachHeader, title: str) -> None:
        self.print_fields(title, self._header_rows(header))

    def _print_fat_header(self, header: FatHeader) -> None:
        self.print_fields("Fat headers", [
            ("fat_magic", f"0x{header.magic:x} ({magic_name(header.magic)})"),
            ("nfat_arch", header.nfat_arch),
        ])

        rows = []
        for index, arch in enumerate(self.image.archs):
            fat_arch = arch.fat_arch
            if fat_arch is None:
                continue
            subtype, caps = split_cpusubtype(fat_arch.cpusubtype)
            rows.append([
                str(index),
                cpu_type_name(fat_arch.cputype),
                str(subtype),
                f"0x{caps:02x}",
                str(fat_arch.offset),
                str(fat_arch.size),
                f"2^{fat_arch.align}" + (f" ({1 << fat_arch.align})" if fat_arch.align < 32 else ""),
                str(fat_arch.reserved) if isinstance(fat_arch, FatArch64) else "-",
            ])
        self.print_table(
            "Architectures",
            ["arch", "cputype", "cpusubtype", "caps", "offset", "size", "align", "reserved"],
            rows,
        )
