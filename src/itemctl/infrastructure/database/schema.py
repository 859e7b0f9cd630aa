"""SQLAlchemy Core table definitions for the itemctl database."""

from __future__ import annotations

from sqlalchemy import Column, Index, Integer, MetaData, Table, Text

metadata = MetaData()

items = Table(
    "items",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("description", Text, nullable=False, default="", server_default=""),
    Column("status", Text, nullable=False),
    Column("email", Text, nullable=False),
)

Index("ix_items_status", items.c.status)
