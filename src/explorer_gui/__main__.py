"""Entry point.

Safe for both `python -m explorer_gui` and running this file directly
(IDEs sometimes launch it as a script, where relative imports fail).
"""

import sys
from pathlib import Path

if __package__ is None or __package__ == "":
    # run as a script -> put src/ on sys.path
    sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
    from explorer_gui.app import main
else:
    from .app import main

if __name__ == "__main__":
    raise SystemExit(main())
