"""
Tally Backend - Record SQLAlchemy Model
========================================

What:  The value of one Variable on one DateRecord.
Who:   Managed through the generic CRUD service (see tally.resources).

Foreign keys:
    VariableId    → variables.id
    DateRecordId  → dateRecords.id

    Column and attribute names keep the PascalCase `...Id` form because they
    are exposed verbatim in request and response bodies. Existence of the
    referenced rows is checked by the service before every write. Deletes of
    a referenced Variable or DateRecord are not cascaded.
"""

from sqlalchemy import Float, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from tally.database import Base


class Record(Base):
    __tablename__ = "records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    record: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        comment="Recorded numeric value",
    )

    VariableId: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("variables.id"),
        nullable=False,
    )

    DateRecordId: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("dateRecords.id"),
        nullable=False,
    )

    # List filters are equality lookups on the two foreign keys
    __table_args__ = (
        Index("idx_records_variable_id", "VariableId"),
        Index("idx_records_date_record_id", "DateRecordId"),
    )

    def __repr__(self) -> str:
        return (
            f"<Record(id={self.id}, record={self.record}, "
            f"VariableId={self.VariableId}, DateRecordId={self.DateRecordId})>"
        )
