from sqlalchemy import BigInteger, Column, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.sql import func
from .base import Base


class Allowance(Base):
    __tablename__ = "allowances"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner = Column(String, index=True, nullable=False)
    spender = Column(String, index=True, nullable=False)
    parent_id = Column(BigInteger, nullable=False)
    remaining = Column(BigInteger, nullable=False, default=0)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (UniqueConstraint("owner", "spender", "parent_id", name="uq_allowance_owner_spender_pid"),)
