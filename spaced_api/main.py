"""
Name: Backend ASGI Entrypoint (spaced_api.main)

Responsibilities:
  - Re-export the FastAPI app for ASGI servers and tooling
  - Keep this module side-effect free beyond importing spaced_api.api.main

Notes/Constraints:
  - uvicorn is configured with `spaced_api.main:app`
"""

from spaced_api.api.main import app

__all__ = ["app"]
