# operations.py
"""
Высокоуровневые операции: цепочки вызовов esptool/mkspiffs.
Каждый шаг ждёт завершения предыдущего; ошибка любого шага прерывает цепочку.
"""
from __future__ import annotations
from pathlib import Path

from rich import print

from .config import PARTITION_TABLE_FILE, Settings
from .errors import ImageMissingError, ImageTooLargeError, PartitionNotFoundError
from .partition import PartitionEntry, load_spiffs_partition
from .tools.esptool import Esptool
from .tools.mkspiffs import Mkspiffs, in_cwd

TABLE_PATH = Path(PARTITION_TABLE_FILE)


def _fetch_partition(flasher: Esptool) -> PartitionEntry | None:
    flasher.read_partition_table(TABLE_PATH)
    return _parse_partition()


def _parse_partition() -> PartitionEntry | None:
    part = load_spiffs_partition(TABLE_PATH)
    if part is not None:
        print(f"[cyan]{part.describe()}[/]")
    return part


def _require(part: PartitionEntry | None) -> PartitionEntry:
    if part is None:
        raise PartitionNotFoundError(str(TABLE_PATH))
    return part


def _result(part: PartitionEntry | None, **extra) -> dict:
    out = {
        "found": part is not None,
        "startAddress": part.start_address if part else 0,
        "size": part.size if part else 0,
    }
    out.update(extra)
    return out


def read_spiffs(settings: Settings, flasher: Esptool, packer: Mkspiffs) -> dict:
    """Раздел SPIFFS с устройства -> файл образа -> каталог данных."""
    part = _require(_fetch_partition(flasher))
    flasher.read_region(settings.file, part.start_address, part.size)
    packer.unpack(settings.file, settings.data)
    return _result(part, image=str(settings.file), data=str(settings.data))


def write_spiffs(settings: Settings, flasher: Esptool, packer: Mkspiffs) -> dict:
    """Каталог данных -> образ размером с раздел -> запись на устройство."""
    part = _require(_fetch_partition(flasher))
    packer.make(settings.data, settings.file, part.size)
    try:
        image_size = in_cwd(settings.file).stat().st_size
    except OSError as e:
        raise ImageMissingError(str(settings.file), e) from e
    if image_size > part.size:
        raise ImageTooLargeError(str(settings.file), image_size, part.size)
    flasher.write_region(settings.file, part.start_address, part.size)
    return _result(part, image=str(settings.file), data=str(settings.data), bytes=image_size)


def read_partition(flasher: Esptool) -> dict:
    part = _fetch_partition(flasher)
    return _result(part)


def unpack_spiffs(settings: Settings, packer: Mkspiffs) -> dict:
    packer.unpack(settings.file, settings.data)
    return {"image": str(settings.file), "data": str(settings.data)}


def make_spiffs(settings: Settings, packer: Mkspiffs) -> dict:
    """Собрать образ по уже сохранённой таблице разделов (partition_table.bin)."""
    part = _require(_parse_partition())
    packer.make(settings.data, settings.file, part.size)
    return _result(part, image=str(settings.file), data=str(settings.data))


def list_spiffs(settings: Settings, packer: Mkspiffs) -> dict:
    packer.list(settings.file)
    return {"image": str(settings.file)}
