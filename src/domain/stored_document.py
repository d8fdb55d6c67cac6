"""Stored Document Entity

Backing table for the SQL document store. Each row holds the JSON value
of one hierarchical path (e.g. `invoices/10001`, `invoiceCounter`).
"""

from datetime import datetime
from typing import Any, Optional
from sqlmodel import Field, Column, SQLModel
from sqlalchemy import Integer, JSON, String
from src.domain.base import utc_now


class StoredDocument(SQLModel, table=True):
    """
    Stored Document - one value per path

    Domain Rules:
    - path is unique (primary key)
    - version increments by exactly 1 on every write
    - conditional writes compare the version read earlier
    """

    __tablename__ = "documents"

    path: str = Field(
        sa_column=Column(String(512), primary_key=True),
        description="Slash separated document path"
    )

    data: Optional[Any] = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
        description="JSON value stored at the path"
    )

    version: int = Field(
        default=1,
        sa_column=Column(Integer, nullable=False, default=1),
        description="Optimistic concurrency token"
    )

    updated_at: datetime = Field(
        default_factory=utc_now,
        description="Last write timestamp"
    )

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "path": "invoiceCounter",
                "data": 10004,
                "version": 5,
                "updated_at": "2024-02-01T00:00:00Z"
            }
        }
