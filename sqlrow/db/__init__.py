"""
sqlrow database layer.

Usage:
    from sqlrow.db import Database

    with Database("sqlite:///:memory:") as db:
        db.execute('CREATE TABLE "post" ("id" INTEGER PRIMARY KEY, "title" TEXT)')
"""

from .engine import Database

__all__ = ["Database"]
