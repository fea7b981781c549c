"""
Tally Backend - Element SQLAlchemy Model
=========================================

What:  Parent entity of ElementInt values.
"""


from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from tally.database import Base


class Element(Base):
    __tablename__ = "elements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)


    def __repr__(self) -> str:
        return f"<Element(id={self.id}, name='{self.name}')>"
