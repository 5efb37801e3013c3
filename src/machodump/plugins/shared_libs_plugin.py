from typing import List

from machodump.core.model import Arch, DylibCommand
from machodump.core.plugin_base import ReportPlugin


def shared_libraries(arch: Arch) -> List[str]:
    """Пути библиотек из LC_LOAD_DYLIB и LC_LOAD_WEAK_DYLIB в порядке команд"""
    return [command.name for command in arch.load_commands if isinstance(command, DylibCommand)]


class SharedLibsPlugin(ReportPlugin):
    """Плагин вывода используемых динамических библиотек"""

    @staticmethod
    def get_name() -> str:
        return "shared_libs"

    @staticmethod
    def get_description() -> str:
        return "Список подключаемых динамических библиотек"

    def render(self) -> None:
        for index, arch in enumerate(self.image.archs):
            if self.image.is_fat:
                self.print_section(f"Shared libraries for Arch {index}")
            else:
                self.print_section("Shared libraries")

            libraries = shared_libraries(arch)
            if not libraries:
                self.print_message("No load dylib load command found")
                continue
            for library in libraries:
                self.print_message(library)
