from sqlalchemy import BigInteger, Boolean, Column, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import Session
from .base import Base
from ntoken.utils.amounts import add_amounts, subtract_amounts, compare_amounts


class Balance(Base):
    __tablename__ = "balances"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner = Column(String, index=True, nullable=False)
    symbol_id = Column(BigInteger, index=True, nullable=False)
    parent_id = Column(BigInteger, nullable=False, default=0)
    amount = Column(BigInteger, nullable=False, default=0)
    allow_send = Column(Boolean, nullable=False, default=False)
    allow_recv = Column(Boolean, nullable=False, default=False)
    paused = Column(Boolean, nullable=False, default=False)
    payer = Column(String, nullable=False, comment="Account charged for the row when it was created")
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (UniqueConstraint("owner", "symbol_id"),)

    @classmethod
    def find(cls, session: Session, owner: str, symbol_id: int) -> "Balance":
        return session.query(cls).filter_by(owner=owner, symbol_id=symbol_id).first()

    @classmethod
    def create(
        cls,
        session: Session,
        owner: str,
        symbol_id: int,
        parent_id: int,
        payer: str,
        amount: int = 0,
        allow_send: bool = False,
        allow_recv: bool = False,
    ) -> "Balance":
        balance = cls(
            owner=owner,
            symbol_id=symbol_id,
            parent_id=parent_id,
            amount=amount,
            allow_send=allow_send,
            allow_recv=allow_recv,
            paused=False,
            payer=payer,
        )
        session.add(balance)
        session.flush()
        return balance

    @property
    def available(self) -> int:
        """Amount visible to readers; paused rows are frozen at zero."""
        return 0 if self.paused else self.amount

    def add_amount(self, amount: int) -> None:
        self.amount = add_amounts(self.amount, amount)

    def subtract_amount(self, amount: int) -> bool:
        if compare_amounts(self.amount, amount) < 0:
            return False
        self.amount = subtract_amounts(self.amount, amount)
        return True

    @classmethod
    def get_total_balance(cls, session: Session, symbol_id: int) -> int:
        result = session.query(func.sum(cls.amount)).filter_by(symbol_id=symbol_id).scalar()
        return int(result or 0)
