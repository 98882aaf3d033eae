# tools/esptool.py
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from ..config import DEFAULT_BAUD, ESPTOOL, PARTITION_TABLE_OFFSET, PARTITION_TABLE_SIZE
from ..errors import PortRequiredError
from .runner import CommandSpec, run_command


@dataclass
class Esptool:
    """
    Чтение/запись flash через esptool.py.
    Порт обязателен: без него ничего не запускается.
    """
    port: str | None
    baud: int = DEFAULT_BAUD
    executable: str = ESPTOOL
    runner: Callable[[CommandSpec], int] = field(default=run_command, repr=False)

    def _command(self, *args: str) -> CommandSpec:
        if not self.port:
            raise PortRequiredError()
        return CommandSpec(self.executable, ("--port", self.port, "--baud", str(self.baud), *args))

    def read_partition_table(self, out_file: Path) -> CommandSpec:
        spec = self._command(
            "read_flash", f"0x{PARTITION_TABLE_OFFSET:x}", f"0x{PARTITION_TABLE_SIZE:x}", str(out_file)
        )
        self.runner(spec)
        return spec

    def read_region(self, out_file: Path, start_address: int, size: int) -> CommandSpec:
        spec = self._command("read_flash", f"0x{start_address:x}", f"0x{size:x}", str(out_file))
        self.runner(spec)
        return spec

    def write_region(self, in_file: Path, start_address: int, size: int | None = None) -> CommandSpec:
        # размер берёт сам esptool из файла
        spec = self._command("write_flash", f"0x{start_address:x}", str(in_file))
        self.runner(spec)
        return spec
