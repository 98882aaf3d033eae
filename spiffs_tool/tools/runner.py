# tools/runner.py
from __future__ import annotations
import shlex
import shutil
import subprocess
from dataclasses import dataclass, field
from typing import Callable

from rich import print
from rich.markup import escape

from ..errors import ProcessFailedError, SpawnError


@dataclass(frozen=True)
class CommandSpec:
    executable: str
    args: tuple[str, ...] = field(default_factory=tuple)

    @property
    def argv(self) -> list[str]:
        return [self.executable, *self.args]

    def __str__(self) -> str:
        return " ".join(shlex.quote(a) for a in self.argv)


def _console_echo(line: str) -> None:
    print(escape(line))


def resolve_executable(name: str) -> str:
    return shutil.which(name) or name


def run_command(spec: CommandSpec, echo: Callable[[str], None] = _console_echo) -> int:
    """
    Запустить внешнюю утилиту и дождаться завершения.
    stdout транслируется построчно через ``echo``, stderr остаётся у терминала.
    Код 0 -> возвращается, иначе ProcessFailedError; не удалось запустить -> SpawnError.
    """
    argv = [resolve_executable(spec.executable), *spec.args]
    try:
        proc = subprocess.Popen(
            argv,
            stdout=subprocess.PIPE,
            text=True,
            errors="replace",
            bufsize=1,
        )
    except OSError as e:
        raise SpawnError(str(spec), e) from e

    with proc:
        for line in proc.stdout:
            echo(line.rstrip("\r\n"))
        code = proc.wait()

    if code != 0:
        raise ProcessFailedError(str(spec), code)
    return code
