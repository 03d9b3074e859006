"""
asgi.py -- ASGI entry point for the user directory.

Run with:  uvicorn asgi:app --reload --port 3002
           python main.py
"""

from api.main import app

__all__ = ["app"]
