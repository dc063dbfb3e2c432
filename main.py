# main.py
from __future__ import annotations
from tools.scd_cli import main

if __name__ == "__main__":
    main()
