"""
Tally Backend - ORM Models
===========================

Importing this package registers every model on `Base.metadata`.

Schema:
    User                     (session identities)
    Variable ─┐
              ├──< Record    (VariableId, DateRecordId)
    DateRecord┘
    Element ─────< ElementInt (ElementId)
"""

from tally.models.user import User
from tally.models.variable import Variable
from tally.models.date_record import DateRecord
from tally.models.record import Record
from tally.models.element import Element
from tally.models.element_int import ElementInt

__all__ = [
    "User",
    "Variable",
    "DateRecord",
    "Record",
    "Element",
    "ElementInt",
]
