# Fichier: app/db/base_class.py
from sqlalchemy.orm import DeclarativeBase

class Base(DeclarativeBase):
    """Declarative base shared by every table (users, paths, progress, achievements)."""
