"""
Tally Backend - Resource Registry
==================================

What:  One ResourceDescriptor per CRUD resource.
Who:   tally.main mounts a router for every entry of RESOURCES.

    Prefix          Model        Required                          Foreign keys
    /variables      Variable     name                              -
    /date-records   DateRecord   date                              -
    /records        Record       record, VariableId, DateRecordId  VariableId, DateRecordId
    /elements       Element      name                              -
    /element-ints   ElementInt   record, ElementId                 ElementId
"""

from tally.models import DateRecord, Element, ElementInt, Record, Variable
from tally.schemas.resources import (
    DateRecordOut,
    DateRecordPayload,
    ElementIntOut,
    ElementIntPayload,
    ElementOut,
    ElementPayload,
    RecordOut,
    RecordPayload,
    VariableOut,
    VariablePayload,
)
from tally.services.crud_service import ResourceDescriptor

VARIABLES = ResourceDescriptor(
    name="variable",
    prefix="/variables",
    model=Variable,
    payload=VariablePayload,
    output=VariableOut,
    required_fields=("name",),
    tag="Variables",
)

DATE_RECORDS = ResourceDescriptor(
    name="date_record",
    prefix="/date-records",
    model=DateRecord,
    payload=DateRecordPayload,
    output=DateRecordOut,
    required_fields=("date",),
    tag="DateRecords",
)

RECORDS = ResourceDescriptor(
    name="record",
    prefix="/records",
    model=Record,
    payload=RecordPayload,
    output=RecordOut,
    required_fields=("record", "VariableId", "DateRecordId"),
    foreign_keys={"VariableId": Variable, "DateRecordId": DateRecord},
    tag="Records",
)

ELEMENTS = ResourceDescriptor(
    name="element",
    prefix="/elements",
    model=Element,
    payload=ElementPayload,
    output=ElementOut,
    required_fields=("name",),
    tag="Elements",
)

ELEMENT_INTS = ResourceDescriptor(
    name="element_int",
    prefix="/element-ints",
    model=ElementInt,
    payload=ElementIntPayload,
    output=ElementIntOut,
    required_fields=("record", "ElementId"),
    foreign_keys={"ElementId": Element},
    tag="ElementInts",
)

RESOURCES = (VARIABLES, DATE_RECORDS, RECORDS, ELEMENTS, ELEMENT_INTS)
