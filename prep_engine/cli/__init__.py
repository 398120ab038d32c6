"""
Command line interface.
"""

from prep_engine.cli.main import app, main

__all__ = ["app", "main"]
