# partition.py
"""Разбор таблицы разделов ESP32.

Таблица лежит во flash по адресу 0x8000 и состоит из 32-байтовых записей:

* 2 байта — магия ``AA 50``;
* 1 байт — тип (0x00 app, 0x01 data);
* 1 байт — подтип (для data: 0x82 — spiffs);
* 4 байта — смещение (LE), 4 байта — размер (LE);
* 16 байт — метка, 4 байта — флаги.

Для работы с SPIFFS достаточно найти последовательность ``AA 50 01 82``
и прочитать два следующих u32.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from .errors import PartitionTableError

SPIFFS_MARKER = b"\xAA\x50\x01\x82"

ENTRY_SIZE = 32
ENTRY_MAGIC = b"\xAA\x50"
MD5_MAGIC = b"\xEB\xEB"

TYPE_NAMES = {0x00: "app", 0x01: "data"}
APP_SUBTYPES = {0x00: "factory", 0x20: "test"}
APP_SUBTYPES.update({0x10 + n: f"ota_{n}" for n in range(16)})
DATA_SUBTYPES = {
    0x00: "ota",
    0x01: "phy",
    0x02: "nvs",
    0x03: "coredump",
    0x04: "nvs_keys",
    0x05: "efuse",
    0x80: "esphttpd",
    0x81: "fat",
    0x82: "spiffs",
    0x83: "littlefs",
}


@dataclass(frozen=True)
class PartitionEntry:
    start_address: int
    size: int

    @property
    def end_address(self) -> int:
        return self.start_address + self.size

    def describe(self) -> str:
        return f"startAddress: 0x{self.start_address:x}, size: 0x{self.size:x}"


@dataclass(frozen=True)
class PartitionRecord:
    """Полная запись таблицы (для `part --all`)."""

    type: int
    subtype: int
    offset: int
    size: int
    label: str
    flags: int

    @property
    def type_name(self) -> str:
        return TYPE_NAMES.get(self.type, f"0x{self.type:02x}")

    @property
    def subtype_name(self) -> str:
        names = {0x00: APP_SUBTYPES, 0x01: DATA_SUBTYPES}.get(self.type, {})
        return names.get(self.subtype, f"0x{self.subtype:02x}")


def find_spiffs_partition(data: bytes) -> PartitionEntry | None:
    """
    Найти первую (по смещению) запись SPIFFS.
    Поиск побайтовый, выравнивание не требуется. None — маркер не найден.
    Маркер, за которым меньше 8 байт, считается повреждённой таблицей.
    """
    for i in range(len(data) - len(SPIFFS_MARKER)):
        if data[i:i + 4] != SPIFFS_MARKER:
            continue
        if i + 12 > len(data):
            raise PartitionTableError(
                f"SPIFFS entry at 0x{i:x} is truncated ({len(data) - i - 4} of 8 bytes)"
            )
        start, size = struct.unpack_from("<II", data, i + 4)
        return PartitionEntry(start_address=start, size=size)
    return None


def load_spiffs_partition(path: Path) -> PartitionEntry | None:
    path = Path(path)
    try:
        data = path.read_bytes()
    except FileNotFoundError as e:
        raise PartitionTableError(f"partition table file not found: {path}") from e
    except OSError as e:
        raise PartitionTableError(f"cannot read partition table {path}: {e}") from e
    return find_spiffs_partition(data)


def iter_partitions(data: bytes) -> Iterator[PartitionRecord]:
    """Перебрать записи с начала таблицы до пустой (0xFF) или MD5-записи."""
    for pos in range(0, len(data) - ENTRY_SIZE + 1, ENTRY_SIZE):
        entry = data[pos:pos + ENTRY_SIZE]
        magic = entry[0:2]
        if magic == MD5_MAGIC or magic == b"\xFF\xFF":
            return
        if magic != ENTRY_MAGIC:
            raise PartitionTableError(f"bad entry magic at 0x{pos:x}: {magic.hex()}")
        ptype, subtype, offset, size = struct.unpack_from("<BBII", entry, 2)
        label = entry[12:28].split(b"\x00", 1)[0].decode("ascii", errors="replace")
        flags = struct.unpack_from("<I", entry, 28)[0]
        yield PartitionRecord(ptype, subtype, offset, size, label, flags)
