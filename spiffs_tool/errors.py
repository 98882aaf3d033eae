# errors.py
from __future__ import annotations


class SpiffsToolError(Exception):
    """Base error. ``exit_code`` is what the CLI exits with."""

    exit_code = 1


class PortRequiredError(SpiffsToolError):
    exit_code = 1

    def __init__(self):
        super().__init__("--port parameter is required for this operation")


class ProcessFailedError(SpiffsToolError):
    exit_code = 2

    def __init__(self, command: str, returncode: int):
        self.command = command
        self.returncode = returncode
        super().__init__(f"{command!r} exited with code {returncode}")


class SpawnError(SpiffsToolError):
    exit_code = 3

    def __init__(self, command: str, reason: OSError):
        self.command = command
        self.reason = reason
        super().__init__(f"cannot start {command!r}: {reason}")


class PartitionTableError(SpiffsToolError):
    exit_code = 4


class PartitionNotFoundError(PartitionTableError):
    def __init__(self, source: str):
        self.source = source
        super().__init__(f"no SPIFFS partition in {source}")


class ImageMissingError(SpiffsToolError):
    exit_code = 6

    def __init__(self, image: str, reason: OSError):
        self.image = image
        self.reason = reason
        super().__init__(f"image {image} was not produced: {reason}")


class ImageTooLargeError(SpiffsToolError):
    exit_code = 5

    def __init__(self, image: str, image_size: int, partition_size: int):
        self.image = image
        self.image_size = image_size
        self.partition_size = partition_size
        super().__init__(
            f"{image} is {image_size} bytes, partition holds only {partition_size} (0x{partition_size:x})"
        )
