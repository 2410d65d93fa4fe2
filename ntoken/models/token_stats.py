from sqlalchemy import BigInteger, Column, DateTime, Index, String, Text
from sqlalchemy.orm import Session
from sqlalchemy.sql import func
from .base import Base
from ntoken.contracts import Symbol


class TokenStats(Base):
    __tablename__ = "token_stats"

    symbol_id = Column(BigInteger, primary_key=True, autoincrement=False)
    parent_id = Column(BigInteger, nullable=False, default=0)
    supply = Column(BigInteger, nullable=False, default=0)
    max_supply = Column(BigInteger, nullable=False)
    issuer = Column(String, nullable=False, index=True)
    ip_owner = Column(String, nullable=False, default="")
    token_uri = Column(Text, nullable=False, default="")
    token_uri_hash = Column(
        String(64),
        nullable=False,
        index=True,
        comment="sha256 of token_uri; unique at creation, settokenuri may introduce duplicates",
    )
    notary = Column(String, nullable=False, default="")
    notarized_at = Column(DateTime, nullable=True)
    issued_at = Column(DateTime, nullable=False, default=func.now())

    __table_args__ = (Index("ix_token_stats_parent_symbol", "parent_id", "symbol_id"),)

    @property
    def symbol(self) -> Symbol:
        return Symbol(id=self.symbol_id, parent_id=self.parent_id)

    @classmethod
    def next_available_id(cls, session: Session) -> int:
        current = session.query(func.max(cls.symbol_id)).scalar()
        return (current or 0) + 1

    def __repr__(self):
        return f"TokenStats(symbol_id={self.symbol_id}, parent_id={self.parent_id}, supply={self.supply}/{self.max_supply})"
