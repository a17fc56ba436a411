"""Database package"""

from docit.db.session import SessionLocal, engine, get_db, init_models

__all__ = ["SessionLocal", "engine", "get_db", "init_models"]
