"""
Tally Backend - Partial Update Values
======================================

What:  Typed representation of a PATCH body where each field is in one of
       three states.

    ABSENT  - the key was not sent; the stored value is kept
    NULL    - the key was sent as null
    VALUE   - the key was sent with a value

How:   `PartialUpdate.from_model()` reads pydantic's `model_fields_set`, which
       contains exactly the keys the client sent (including explicit nulls),
       so "not sent" and "sent as null" never collapse into the same None.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from pydantic import BaseModel


class FieldState(str, Enum):
    ABSENT = "absent"
    NULL = "null"
    VALUE = "value"


@dataclass(frozen=True)
class FieldValue:
    """One field of a partial update."""

    state: FieldState
    value: Any = None

    @classmethod
    def absent(cls) -> "FieldValue":
        return cls(FieldState.ABSENT)

    @classmethod
    def null(cls) -> "FieldValue":
        return cls(FieldState.NULL)

    @classmethod
    def of(cls, value: Any) -> "FieldValue":
        if value is None:
            return cls.null()
        return cls(FieldState.VALUE, value)

    @property
    def is_absent(self) -> bool:
        return self.state is FieldState.ABSENT

    @property
    def is_null(self) -> bool:
        return self.state is FieldState.NULL

    @property
    def has_value(self) -> bool:
        return self.state is FieldState.VALUE


_ABSENT = FieldValue.absent()


@dataclass(frozen=True)
class PartialUpdate:
    """
    The updatable fields of a resource, each with its FieldValue.

    Fields not listed in `fields` are treated as ABSENT.
    """

    fields: Dict[str, FieldValue] = field(default_factory=dict)

    @classmethod
    def from_model(
        cls,
        model: BaseModel,
        names: Optional[Iterable[str]] = None,
    ) -> "PartialUpdate":
        """
        Build from a validated pydantic body.

        Args:
            model: Parsed request body
            names: Updatable field names; defaults to every declared field
        """
        sent = model.model_fields_set
        names = list(names) if names is not None else list(type(model).model_fields)
        values: Dict[str, FieldValue] = {}
        for name in names:
            if name in sent:
                values[name] = FieldValue.of(getattr(model, name))
            else:
                values[name] = _ABSENT
        return cls(values)

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "PartialUpdate":
        """Every key in `data` is present; None becomes NULL."""
        return cls({name: FieldValue.of(value) for name, value in data.items()})

    def get(self, name: str) -> FieldValue:
        return self.fields.get(name, _ABSENT)

    def is_empty(self) -> bool:
        """True when no field was sent at all."""
        return all(value.is_absent for value in self.fields.values())

    def null_fields(self, names: Optional[Iterable[str]] = None) -> List[str]:
        """Names sent as explicit null, optionally restricted to `names`."""
        candidates = list(names) if names is not None else list(self.fields)
        return [name for name in candidates if self.get(name).is_null]

    def present(self) -> Iterator[Tuple[str, FieldValue]]:
        """(name, FieldValue) for every field that was sent."""
        for name, value in self.fields.items():
            if not value.is_absent:
                yield name, value

    def values(self) -> Dict[str, Any]:
        """Plain dict of the sent fields (nulls included as None)."""
        return {name: value.value for name, value in self.present()}
