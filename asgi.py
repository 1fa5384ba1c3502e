"""
asgi.py -- Application assembly for Stockroom.

This is the one place the ASGI server imports. It reads the environment once
through get_settings() and hands the result to create_app(); api/main.py
itself never reads configuration.

Run with:  uvicorn asgi:app --reload
           make run
"""

from api.main import create_app
from core.config import get_settings

app = create_app(get_settings())
