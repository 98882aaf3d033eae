from __future__ import annotations
from spiffs_tool.main import app


def main():
    app()


if __name__ == "__main__":
    main()
