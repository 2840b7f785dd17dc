"""
Run the CLI as ``python -m oneview_driver <command> <name>``.
"""

import sys
from pathlib import Path

# oneview_machine.py lives next to the package in a source checkout
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from oneview_machine import main

if __name__ == "__main__":
    main()
