"""Global pytest configuration."""
import sys
from pathlib import Path

# Make 02_src packages importable without installing the project
project_root = Path(__file__).parent
src_root = project_root / "02_src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))
