from pathlib import Path

import pytest

from conftest import FakeRunner
from spiffs_tool.errors import PortRequiredError
from spiffs_tool.tools.esptool import Esptool
from spiffs_tool.tools.mkspiffs import Mkspiffs


def test_read_partition_table():
    runner = FakeRunner()
    spec = Esptool("COM18", runner=runner).read_partition_table(Path("partition_table.bin"))
    assert spec.argv == [
        "esptool.py", "--port", "COM18", "--baud", "921600",
        "read_flash", "0x8000", "0x1000", "partition_table.bin",
    ]
    assert runner.calls == [spec]


def test_read_region_hex_args():
    runner = FakeRunner()
    spec = Esptool("/dev/ttyUSB0", baud=115200, runner=runner).read_region(Path("data.spiffs"), 0x290000, 0x170000)
    assert spec.args == (
        "--port", "/dev/ttyUSB0", "--baud", "115200",
        "read_flash", "0x290000", "0x170000", "data.spiffs",
    )


def test_write_region_omits_size():
    runner = FakeRunner()
    spec = Esptool("COM3", runner=runner).write_region(Path("data.spiffs"), 0x290000, 0x170000)
    assert spec.args[-3:] == ("write_flash", "0x290000", "data.spiffs")
    assert "0x170000" not in spec.args


@pytest.mark.parametrize("port", [None, ""])
def test_port_required(port):
    runner = FakeRunner()
    flasher = Esptool(port, runner=runner)
    with pytest.raises(PortRequiredError):
        flasher.read_partition_table(Path("partition_table.bin"))
    with pytest.raises(PortRequiredError):
        flasher.write_region(Path("data.spiffs"), 0x1000)
    assert runner.calls == []


def test_mkspiffs_commands(workdir):
    runner = FakeRunner()
    packer = Mkspiffs(runner=runner)
    data, image = str(workdir / "data"), str(workdir / "data.spiffs")

    assert packer.make(Path("data"), Path("data.spiffs"), 0x170000).argv == [
        "mkspiffs", "-c", data, image, "-p", "256", "-b", "4096", "-s", str(0x170000),
    ]
    assert packer.unpack(Path("data.spiffs"), Path("data")).argv == ["mkspiffs", "-u", data, image]
    assert packer.list(Path("data.spiffs")).argv == ["mkspiffs", "-l", image]


def test_mkspiffs_keeps_absolute_paths(workdir, tmp_path_factory):
    other = tmp_path_factory.mktemp("elsewhere") / "img.spiffs"
    spec = Mkspiffs(executable="/opt/mkspiffs", runner=FakeRunner()).list(other)
    assert spec.argv == ["/opt/mkspiffs", "-l", str(other)]
