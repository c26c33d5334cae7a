"""
MediFlex - command line launcher

Run without installing:  python main.py parse --mode order receipt.txt
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

from mediflex.cli import main

if __name__ == "__main__":
    sys.exit(main())
