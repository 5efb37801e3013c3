from abc import ABC, abstractmethod
from typing import List, Sequence, Tuple

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .model import Image


class ReportPlugin(ABC):
    """Базовый класс для всех плагинов отчёта по разобранному образу"""

    def __init__(self, image: Image, console: Console):
        self.image = image
        self.console = console

    @abstractmethod
    def render(self) -> None:
        """Выводит свой раздел отчёта в консоль"""

    @staticmethod
    @abstractmethod
    def get_name() -> str:
        """Возвращает имя плагина"""

    @staticmethod
    @abstractmethod
    def get_description() -> str:
        """Возвращает описание функционала плагина"""

    @staticmethod
    def get_version() -> str:
        return "1.0"

    def print_table(self, title: str, columns: List[str], rows: Sequence[Sequence[str]],
                    style: str = "bold magenta") -> None:
        """Выводит таблицу с данными"""
        table = Table(show_header=True, header_style=style, title=escape(title))
        for column in columns:
            table.add_column(column)
        for row in rows:
            table.add_row(*[escape(str(value)) for value in row])
        self.console.print(table)

    def print_fields(self, title: str, rows: Sequence[Tuple[str, object]]) -> None:
        """Выводит пары поле/значение"""
        table = Table(show_header=True, header_style="bold cyan", title=escape(title))
        table.add_column("Поле", style="cyan")
        table.add_column("Значение", style="yellow")
        for field, value in rows:
            table.add_row(field, escape(str(value)))
        self.console.print(table)

    def print_section(self, title: str) -> None:
        """Выводит заголовок секции"""
        self.console.print(f"\n[bold blue]{escape(title)}[/bold blue]")

    def print_message(self, message: str) -> None:
        self.console.print(escape(message))
