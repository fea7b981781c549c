"""
Tally Backend - ElementInt SQLAlchemy Model
============================================

What:  Integer value belonging to an Element (one Element has many).
How:   Same shape as Record with a single foreign key; handled by the same
       generic CRUD service.
"""

from sqlalchemy import ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from tally.database import Base


class ElementInt(Base):
    __tablename__ = "elementInts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    record: Mapped[int] = mapped_column(Integer, nullable=False)

    ElementId: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("elements.id"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<ElementInt(id={self.id}, record={self.record}, ElementId={self.ElementId})>"
