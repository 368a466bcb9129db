"""
FastAPI server for the Jan Sahayak engine.

This package provides a thin HTTP wrapper around the dialogue orchestrator.
"""

from .main import app, create_app

__all__ = ["app", "create_app"]
