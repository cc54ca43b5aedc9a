from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON


class AdminLog(SQLModel, table=True):
    __tablename__ = "admin_logs"
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)

    admin_email: str
    action: str = Field(index=True)
    entity_type: str
    entity_id: str = Field(index=True)

    details: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=datetime.utcnow)
