from sqlalchemy import Boolean, Column, DateTime, Integer, JSON
from sqlalchemy.sql import func
from .base import Base

SINGLETON_ID = 1


class GlobalStateRow(Base):
    __tablename__ = "global_state"

    id = Column(Integer, primary_key=True, default=SINGLETON_ID)
    notaries = Column(JSON, nullable=False, default=list)
    creators = Column(JSON, nullable=False, default=list, comment="Creator whitelist")
    check_creator = Column(Boolean, nullable=False, default=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
