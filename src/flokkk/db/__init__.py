# src/flokkk/db/__init__.py
"""Persistence layer: engine, sessions and time helpers."""

from .session import Base, SessionLocal, engine, get_db

__all__ = ["Base", "SessionLocal", "engine", "get_db"]
