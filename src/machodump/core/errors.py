class MachOError(Exception):
    """Базовое исключение декодера Mach-O"""


class FileAccessError(MachOError):
    """Ошибка открытия, позиционирования или чтения файла"""

    def __init__(self, path: str, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path


class ShortRead(MachOError):
    """Данных меньше, чем требует запись или заявленный блок"""

    def __init__(self, expected: int, actual: int, what: str = "данные"):
        super().__init__(f"Недостаточно байт ({what}): ожидалось {expected}, получено {actual}")
        self.expected = expected
        self.actual = actual


class UnknownFormatError(MachOError):
    """Magic number не относится ни к одному известному формату"""

    def __init__(self, magic: int, message: str = "Неизвестный тип образа"):
        super().__init__(f"{message} (magic 0x{magic:08x})")
        self.magic = magic
