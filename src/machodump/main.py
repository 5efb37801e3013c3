#!/usr/bin/env python3

import argparse
import logging
import sys
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

from machodump.core.errors import MachOError
from machodump.core.formatting import describe_image
from machodump.core.model import Image
from machodump.core.parser import parse
from machodump.core.plugin_manager import PluginManager

console = Console()

logger = logging.getLogger("machodump")


class MachOReporter:
    """Вывод отчёта по разобранному Mach-O образу"""

    def __init__(self, image: Image, output: Optional[Console] = None):
        self.image = image
        self.console = output or console
        self.plugin_manager = PluginManager()
        self.plugin_manager.load_plugins()

        # Упорядоченный список разделов отчёта
        self.ordered_plugins = [
            "mach_header",    # 1. Заголовок
            "load_commands",  # 2. Команды загрузки
            "shared_libs",    # 3. Динамические библиотеки
        ]

    def print_info_panel(self, title: str, content: str) -> None:
        """Выводит информационную панель"""
        self.console.print(Panel(escape(content), title=title, border_style="blue"))

    def _get_available_ordered_plugins(self) -> List[str]:
        """Возвращает список доступных плагинов в установленном порядке"""
        available_plugins = self.plugin_manager.get_available_plugins()
        return [plugin for plugin in self.ordered_plugins if plugin in available_plugins]

    def report(self, selected: List[str]) -> None:
        """Выводит сводку и выбранные разделы отчёта"""
        self.print_info_panel("Образ", describe_image(self.image))
        for plugin_name in self._get_available_ordered_plugins():
            if plugin_name not in selected:
                continue
            plugin = self.plugin_manager.instantiate_plugin(plugin_name, self.image, self.console)
            plugin.render()


def print_error(message: str) -> None:
    """Выводит сообщение об ошибке"""
    console.print(f"[red]Ошибка: {escape(message)}[/red]")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='machodump',
        description='Mach-O / FAT file dumper',
        add_help=False,
    )
    parser.add_argument('file', help='Path to Mach-O file to analyze')
    parser.add_argument('-h', dest='mach_header', action='store_true', help='print the mach header')
    parser.add_argument('-l', dest='load_commands', action='store_true', help='print the load commands')
    parser.add_argument('-L', dest='shared_libs', action='store_true', help='print shared libraries used')
    parser.add_argument('-v', '--verbose', action='store_true', help='enable debug logging')
    parser.add_argument('-?', '--help', action='help', help='show this help message and exit')
    return parser


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    selected = [name for name in ("mach_header", "load_commands", "shared_libs") if getattr(args, name)]
    if not selected:
        parser.error("Please use an option. See --help for available options.")

    setup_logging(args.verbose)

    try:
        image = parse(args.file)
    except MachOError as e:
        logger.debug("Разбор %s завершился ошибкой", args.file, exc_info=True)
        print_error(str(e))
        return 1

    MachOReporter(image).report(selected)
    return 0


if __name__ == '__main__':
    sys.exit(main())
