from __future__ import annotations
import struct

import pytest

from spiffs_tool.partition import SPIFFS_MARKER


def make_table(start: int = 0x290000, size: int = 0x170000, pad: int = 0x40) -> bytes:
    """Таблица: nvs, factory, spiffs, затем 0xFF до 0x1000."""
    def entry(ptype, subtype, offset, psize, label):
        return (
            b"\xAA\x50" + bytes([ptype, subtype]) + struct.pack("<II", offset, psize)
            + label.encode().ljust(16, b"\x00") + b"\x00" * 4
        )

    body = (
        entry(0x01, 0x02, 0x9000, 0x5000, "nvs")
        + entry(0x00, 0x00, 0x10000, 0x280000, "factory")
        + entry(0x01, 0x82, start, size, "spiffs")
    )
    return body + b"\xFF" * (0x1000 - len(body))


class FakeRunner:
    """Записывает вызовы вместо запуска процессов."""

    def __init__(self, table: bytes | None = None, fail_on: str | None = None, returncode: int = 2,
                 make_image: bool = True):
        self.calls = []
        self.table = table
        self.fail_on = fail_on
        self.returncode = returncode
        self.make_image = make_image

    def __call__(self, spec):
        from spiffs_tool.errors import ProcessFailedError

        self.calls.append(spec)
        if self.fail_on and self.fail_on in spec.args:
            raise ProcessFailedError(str(spec), self.returncode)
        if "read_flash" in spec.args and self.table is not None and spec.args[-2] == "0x1000":
            with open(spec.args[-1], "wb") as f:
                f.write(self.table)
        if "-c" in spec.args and self.make_image:
            # mkspiffs -c <dir> <image> ... -s <size>
            image = spec.args[2]
            size = int(spec.args[spec.args.index("-s") + 1])
            with open(image, "wb") as f:
                f.write(b"\xFF" * size)
        return 0


@pytest.fixture
def spiffs_table() -> bytes:
    return make_table()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def marker() -> bytes:
    return SPIFFS_MARKER
