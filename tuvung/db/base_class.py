# Fichier: tuvung/db/base_class.py
from sqlalchemy.orm import DeclarativeBase

class Base(DeclarativeBase):
    """
    Declarative base shared by every SQLAlchemy model.
    Used to create the local schema mirroring the managed database.
    """
