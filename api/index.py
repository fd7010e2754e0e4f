"""Vercel Serverless Function entry point.

Routes /api/* requests to the FastAPI application.
"""

import os
import sys

# Ensure the project root is importable when the package is not installed
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from spacetraffic.backend.main import app  # noqa: E402, F401
