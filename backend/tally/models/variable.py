"""
Tally Backend - Variable SQLAlchemy Model
==========================================

What:  A named quantity being tracked (e.g. "weight", "steps").
Who:   Referenced by Record.VariableId; existence is checked before a
       Record is written or filtered by it.
"""


from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from tally.database import Base


class Variable(Base):
    __tablename__ = "variables"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)


    def __repr__(self) -> str:
        return f"<Variable(id={self.id}, name='{self.name}')>"
