"""
Tally Backend - DateRecord SQLAlchemy Model
============================================

What:  One calendar day on which values were recorded.
Who:   Referenced by Record.DateRecordId.
"""

import datetime

from sqlalchemy import Date, Integer
from sqlalchemy.orm import Mapped, mapped_column

from tally.database import Base


class DateRecord(Base):
    __tablename__ = "dateRecords"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)


    def __repr__(self) -> str:
        return f"<DateRecord(id={self.id}, date='{self.date}')>"
