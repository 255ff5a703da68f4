"""
Database models.

Importing this package registers every model with Base.metadata, which
`Database.create_tables()` relies on.
"""

from .user import User

__all__ = ["User"]
