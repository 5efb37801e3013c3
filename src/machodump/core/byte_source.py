import logging
from typing import BinaryIO

from .errors import FileAccessError, ShortRead

logger = logging.getLogger(__name__)


class ByteSource:
    """Последовательное и произвольное чтение байт файла.

    Курсор может двигаться в обе стороны, это нужно для обхода
    архитектур FAT-контейнера. Используется как контекстный менеджер:
    файл закрывается на любом пути выхода.
    """

    def __init__(self, path: str, handle: BinaryIO):
        self.path = path
        self._handle = handle

    @classmethod
    def open(cls, path: str) -> "ByteSource":
        """Открывает файл для чтения"""
        try:
            handle = open(path, 'rb')
        except OSError as e:
            raise FileAccessError(path, f"не удалось открыть файл: {e.strerror or e}") from e
        logger.debug("Открыт файл %s", path)
        return cls(path, handle)

    def read(self, count: int) -> bytes:
        """Читает ровно count байт"""
        try:
            data = self._handle.read(count)
        except OSError as e:
            raise FileAccessError(self.path, f"ошибка чтения: {e.strerror or e}") from e
        if len(data) != count:
            raise ShortRead(count, len(data), f"{self.path} @ {self.position() - len(data)}")
        return data

    def seek(self, offset: int) -> None:
        """Переходит к абсолютному смещению"""
        try:
            self._handle.seek(offset)
        except (OSError, OverflowError, ValueError) as e:
            raise FileAccessError(self.path, f"не удалось перейти к смещению {offset}: {e}") from e

    def position(self) -> int:
        """Текущее смещение курсора"""
        try:
            return self._handle.tell()
        except OSError as e:
            raise FileAccessError(self.path, f"не удалось получить позицию: {e.strerror or e}") from e

    def close(self) -> None:
        self._handle.close()

    def __enter__(self) -> "ByteSource":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
