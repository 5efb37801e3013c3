import re
import struct
import sys
from typing import Tuple

WORD_SIZE = 4

_FIELD = re.compile(r'(\d*)([a-zA-Z])')


def swap_words(data: bytes) -> bytes:
    """Разворачивает порядок байт внутри каждой 4-байтной группы.

    Порядок самих групп сохраняется, неполная последняя группа
    разворачивается целиком. Повторное применение возвращает исходные байты.
    """
    swapped = bytearray(len(data))
    for start in range(0, len(data), WORD_SIZE):
        swapped[start:start + WORD_SIZE] = data[start:start + WORD_SIZE][::-1]
    return bytes(swapped)


def normalize(data: bytes, swap: bool) -> bytes:
    """Приводит буфер к порядку байт хоста"""
    return swap_words(data) if swap else bytes(data)


def record_size(fmt: str) -> int:
    return struct.calcsize('=' + fmt)


def _swapped_u64(data: bytes, offset: int) -> int:
    # после перестановки внутри слов сами слова остались в порядке источника
    first, second = struct.unpack_from('=II', data, offset)
    if sys.byteorder == 'little':
        return (first << 32) | second
    return (second << 32) | first


def unpack_record(fmt: str, data: bytes, offset: int = 0, swap: bool = False) -> Tuple:
    """Распаковывает запись из нормализованного буфера в порядке хоста.

    Для swap=True 64-битные поля собираются из двух 32-битных слов
    с учётом порядка слов в исходном файле.
    """
    if not swap or 'Q' not in fmt:
        return struct.unpack_from('=' + fmt, data, offset)

    values = []
    for count, code in _FIELD.findall(fmt):
        repeat = int(count) if count else 1
        if code == 'Q':
            for _ in range(repeat):
                values.append(_swapped_u64(data, offset))
                offset += 8
        elif code == 's':
            values.append(bytes(data[offset:offset + repeat]))
            offset += repeat
        else:
            part = '=%d%s' % (repeat, code)
            values.extend(struct.unpack_from(part, data, offset))
            offset += struct.calcsize(part)
    return tuple(values)


def fixed_string(raw: bytes, swap: bool) -> str:
    """Декодирует массив символов фиксированной длины (имя сегмента, секции)"""
    text = normalize(raw, swap)
    end = text.find(b'\x00')
    if end != -1:
        text = text[:end]
    return text.decode('utf-8', errors='replace')
