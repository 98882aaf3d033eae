from __future__ import annotations
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import typer
from rich import print
from rich.table import Table
from serial.tools import list_ports

from .config import (
    DEFAULT_BAUD, DEFAULT_DATA_DIR, DEFAULT_IMAGE_FILE, ESPTOOL, LOG_FILE, MKSPIFFS, Settings,
)
from .errors import SpiffsToolError
from .operations import (
    TABLE_PATH, list_spiffs, make_spiffs, read_partition, read_spiffs, unpack_spiffs, write_spiffs,
)
from .partition import PartitionEntry, iter_partitions
from .tools.esptool import Esptool
from .tools.mkspiffs import Mkspiffs
from .tools.runner import run_command

app = typer.Typer(add_completion=False, help="Чтение/запись SPIFFS-образа ESP32 через esptool.py и mkspiffs.")


def _log_event(kind: str, payload: dict):
    record = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "kind": kind,
        "payload": payload,
    }
    # сбой записи лога не прерывает команду
    try:
        LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        with open(LOG_FILE, "a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=False) + "\n")
    except OSError as e:
        print(f"[yellow]Не удалось записать лог {LOG_FILE}:[/] {e}")


def _flasher(settings: Settings) -> Esptool:
    return Esptool(port=settings.port, baud=settings.speed, executable=settings.esptool, runner=run_command)


def _packer(settings: Settings) -> Mkspiffs:
    return Mkspiffs(executable=settings.mkspiffs, runner=run_command)


def _guarded(kind: str, action: Callable[[], dict]) -> dict:
    """Единая точка обработки ошибок: сообщение, запись в лог, код выхода."""
    try:
        result = action()
    except SpiffsToolError as e:
        print(f"[red]Ошибка ({kind}):[/] {e}")
        _log_event("error", {"command": kind, "error": type(e).__name__, "message": str(e)})
        raise typer.Exit(code=e.exit_code)
    _log_event(kind, result)
    return result


@app.callback()
def main(
    ctx: typer.Context,
    port: str = typer.Option(None, "--port", "-p", envvar="SPIFFS_PORT", help="COM-порт, напр. COM3 или /dev/ttyUSB0"),
    speed: int = typer.Option(DEFAULT_BAUD, "--speed", "-s", help="Скорость порта"),
    data: Path = typer.Option(Path(DEFAULT_DATA_DIR), "--data", "-d", help="Каталог с данными"),
    file: Path = typer.Option(Path(DEFAULT_IMAGE_FILE), "--file", "-f", help="Файл SPIFFS-образа"),
    esptool: str = typer.Option(ESPTOOL, envvar="ESPTOOL", help="Путь к esptool"),
    mkspiffs: str = typer.Option(MKSPIFFS, envvar="MKSPIFFS", help="Путь к mkspiffs"),
):
    ctx.obj = Settings(port=port, speed=speed, data=data, file=file, esptool=esptool, mkspiffs=mkspiffs)


@app.command()
def read(ctx: typer.Context):
    """Считать SPIFFS с ESP32 и распаковать в каталог данных."""
    s: Settings = ctx.obj
    result = _guarded("read", lambda: read_spiffs(s, _flasher(s), _packer(s)))
    print(f"[green]Готово:[/] {result['image']} -> {result['data']}")


@app.command()
def write(ctx: typer.Context):
    """Собрать образ из каталога данных и записать его в ESP32."""
    s: Settings = ctx.obj
    result = _guarded("write", lambda: write_spiffs(s, _flasher(s), _packer(s)))
    print(f"[green]Готово:[/] записано {result['bytes']} байт по адресу 0x{result['startAddress']:x}")


@app.command()
def part(
    ctx: typer.Context,
    all_: bool = typer.Option(False, "--all", help="Показать всю таблицу разделов"),
):
    """Считать и показать таблицу разделов."""
    s: Settings = ctx.obj
    result = _guarded("part", lambda: read_partition(_flasher(s)))
    if not result["found"]:
        print("[yellow]Раздел SPIFFS в таблице не найден.[/]")
        print(PartitionEntry(0, 0).describe())
    print(f"{{ startAddress: {result['startAddress']}, size: {result['size']} }}")
    if all_:
        _print_table()


def _print_table():
    try:
        records = list(iter_partitions(TABLE_PATH.read_bytes()))
    except SpiffsToolError as e:
        print(f"[red]Ошибка разбора таблицы:[/] {e}")
        raise typer.Exit(code=e.exit_code)
    table = Table(title=str(TABLE_PATH))
    for col in ("label", "type", "subtype", "offset", "size"):
        table.add_column(col)
    for r in records:
        table.add_row(r.label, r.type_name, r.subtype_name, f"0x{r.offset:08x}", f"{r.size // 1024} KB")
    print(table)


@app.command()
def unpack(ctx: typer.Context):
    """Распаковать SPIFFS-образ в каталог данных."""
    s: Settings = ctx.obj
    _guarded("unpack", lambda: unpack_spiffs(s, _packer(s)))


@app.command()
def make(ctx: typer.Context):
    """Собрать SPIFFS-образ (по сохранённому partition_table.bin)."""
    s: Settings = ctx.obj
    _guarded("make", lambda: make_spiffs(s, _packer(s)))


@app.command("list")
def list_cmd(ctx: typer.Context):
    """Показать содержимое SPIFFS-образа."""
    s: Settings = ctx.obj
    _guarded("list", lambda: list_spiffs(s, _packer(s)))


@app.command()
def ports():
    """Показать доступные COM-порты."""
    found = list_ports.comports()
    if not found:
        print("[yellow]Порты не найдены.[/]")
        return
    for p in found:
        print(f"[cyan]{p.device}[/] - {p.description}")


if __name__ == "__main__":
    app()
