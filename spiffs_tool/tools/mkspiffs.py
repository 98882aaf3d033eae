# tools/mkspiffs.py
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from ..config import MKSPIFFS, SPIFFS_BLOCK_SIZE, SPIFFS_PAGE_SIZE
from .runner import CommandSpec, run_command


def in_cwd(path: Path) -> Path:
    """Пути для mkspiffs считаются от текущего каталога."""
    return Path.cwd() / path


@dataclass
class Mkspiffs:
    executable: str = MKSPIFFS
    page_size: int = SPIFFS_PAGE_SIZE
    block_size: int = SPIFFS_BLOCK_SIZE
    runner: Callable[[CommandSpec], int] = field(default=run_command, repr=False)

    def _run(self, *args: str) -> CommandSpec:
        spec = CommandSpec(self.executable, args)
        self.runner(spec)
        return spec

    def make(self, data_dir: Path, image: Path, size: int) -> CommandSpec:
        return self._run(
            "-c", str(in_cwd(data_dir)), str(in_cwd(image)),
            "-p", str(self.page_size), "-b", str(self.block_size), "-s", str(size),
        )

    def unpack(self, image: Path, data_dir: Path) -> CommandSpec:
        return self._run("-u", str(in_cwd(data_dir)), str(in_cwd(image)))

    def list(self, image: Path) -> CommandSpec:
        return self._run("-l", str(in_cwd(image)))
