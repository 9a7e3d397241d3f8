import sys
from pathlib import Path

# Add the src directory to sys.path so the packages import when run from a checkout
src_dir = Path(__file__).resolve().parent
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from app.main import main

if __name__ == "__main__":
    sys.exit(main())
