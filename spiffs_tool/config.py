from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path

LOG_DIR = Path(os.environ.get("SPIFFS_TOOL_LOG_DIR", Path(__file__).parent / "logs"))
LOG_FILE = LOG_DIR / "session.jsonl"
APP_NAME = "SPIFFS Tool"

DEFAULT_BAUD = 921600
DEFAULT_DATA_DIR = "data"
DEFAULT_IMAGE_FILE = "data.spiffs"

# Partition table location on ESP32 flash
PARTITION_TABLE_FILE = "partition_table.bin"
PARTITION_TABLE_OFFSET = 0x8000
PARTITION_TABLE_SIZE = 0x1000

# mkspiffs geometry
SPIFFS_PAGE_SIZE = 256
SPIFFS_BLOCK_SIZE = 4096

ESPTOOL = "esptool.py"
MKSPIFFS = "mkspiffs"


@dataclass(frozen=True)
class Settings:
    """Options of one invocation, shared read-only by every step."""

    port: str | None = None
    speed: int = DEFAULT_BAUD
    data: Path = Path(DEFAULT_DATA_DIR)
    file: Path = Path(DEFAULT_IMAGE_FILE)
    esptool: str = ESPTOOL
    mkspiffs: str = MKSPIFFS
