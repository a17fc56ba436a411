"""Declarative base for the SQLAlchemy ORM models"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
