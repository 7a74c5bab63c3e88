"""
Vercel serverless function entry point.
Exposes the FastAPI app of the feed formulation service.
"""

import sys
from pathlib import Path

# Project root holds the feedmix package
root_path = Path(__file__).parent.parent
sys.path.insert(0, str(root_path))

from feedmix.main import app  # noqa: E402,F401
