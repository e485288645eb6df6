"""
Value extraction from records.

Two strategies are supported: named-field lookup on structured objects
(pydantic models, dataclasses, plain objects) and key lookup on string-keyed
mappings. A column may also carry an explicit accessor callable.
"""

import dataclasses
import inspect
import logging
import typing
from collections.abc import Mapping
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from models import ColumnSpec, ExtractionStrategy
from .errors import AccessFault

logger = logging.getLogger(__name__)


class _Empty:
    """Sentinel for an unresolved value."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "EMPTY"

    def __bool__(self):
        return False


EMPTY = _Empty()


def declared_fields(source: Any) -> List[str]:
    """
    Names of the fields declared by a record or record type, in declaration order.

    Private attributes are included.
    """
    cls = source if isinstance(source, type) else type(source)

    if issubclass(cls, BaseModel):
        names = list(cls.model_fields)
        names.extend(getattr(cls, "__private_attributes__", {}) or {})
        return names

    if dataclasses.is_dataclass(cls):
        return [f.name for f in dataclasses.fields(cls)]

    names: List[str] = []
    for klass in reversed(cls.__mro__):
        for slot in _slots_of(klass):
            if slot not in names and slot not in ("__dict__", "__weakref__"):
                names.append(slot)

    if not isinstance(source, type):
        for name in getattr(source, "__dict__", {}):
            if name not in names:
                names.append(name)
    else:
        for name in _class_annotations(cls):
            if name not in names:
                names.append(name)
    return names


def declared_types(record_type: type) -> Dict[str, Any]:
    """Field name -> annotated type for a record type; unannotated fields map to None."""
    if issubclass(record_type, BaseModel):
        hints = {name: info.annotation for name, info in record_type.model_fields.items()}
    else:
        try:
            hints = typing.get_type_hints(record_type)
        except Exception as e:
            logger.warning(f"Could not resolve annotations of {record_type.__name__}: {e}")
            hints = dict(_class_annotations(record_type))
    return {name: hints.get(name) for name in declared_fields(record_type)}


def extract_field(record: Any, name: str) -> Any:
    """
    Read a named field from a structured record.

    Visibility is ignored: private pydantic attributes, slots and
    name-mangled attributes are all readable. Returns EMPTY when the field
    does not exist or holds None.
    """
    try:
        value = _read_field(record, name)
    except AccessFault as e:
        logger.warning(f"Field '{name}' unreadable on {type(record).__name__}: {e}")
        return EMPTY

    if value is None:
        return EMPTY
    return value


def extract_key(record: Any, key: str) -> Any:
    """Look up an exact string key in a mapping record. Returns EMPTY when absent."""
    if not isinstance(record, Mapping):
        logger.warning(
            f"Key '{key}' requested from non-mapping record {type(record).__name__}"
        )
        return EMPTY

    try:
        value = record.get(key)
    except Exception as e:
        logger.warning(f"Key '{key}' unreadable: {e}")
        return EMPTY

    if value is None:
        return EMPTY
    return value


def resolve(record: Any, column: ColumnSpec, strategy: ExtractionStrategy) -> Any:
    """Raw value for a column of a record, or EMPTY."""
    if column.accessor is not None:
        try:
            value = column.accessor(record)
        except Exception as e:
            logger.warning(f"Accessor for column '{column.header}' failed: {e}")
            return EMPTY
        return EMPTY if value is None else value

    if strategy == ExtractionStrategy.KEY:
        return extract_key(record, column.binding)
    return extract_field(record, column.binding)


def _read_field(record: Any, name: str) -> Any:
    if isinstance(record, BaseModel):
        if name in type(record).model_fields:
            return _guarded_getattr(record, name)
        private = getattr(record, "__pydantic_private__", None) or {}
        if name in private:
            return private[name]
        raise AccessFault(f"no declared field '{name}'")

    if dataclasses.is_dataclass(record) and not isinstance(record, type):
        if name in {f.name for f in dataclasses.fields(record)}:
            return _guarded_getattr(record, name)
        raise AccessFault(f"no declared field '{name}'")

    instance_dict: Optional[dict] = getattr(record, "__dict__", None)
    if instance_dict is not None and name in instance_dict:
        return instance_dict[name]

    for klass in type(record).__mro__:
        if name in _slots_of(klass):
            return _guarded_getattr(record, name, default=None)

    # __name is stored as _Class__name
    if name.startswith("__") and not name.endswith("__"):
        for klass in type(record).__mro__:
            mangled = f"_{klass.__name__.lstrip('_')}{name}"
            if instance_dict is not None and mangled in instance_dict:
                return instance_dict[mangled]

    raise AccessFault(f"no declared field '{name}'")


def _guarded_getattr(record: Any, name: str, default: Any = EMPTY) -> Any:
    try:
        return getattr(record, name)
    except AttributeError:
        if default is EMPTY:
            raise AccessFault(f"field '{name}' has no value")
        return default
    except Exception as e:
        raise AccessFault(str(e)) from e


def _slots_of(klass: type) -> tuple:
    slots = klass.__dict__.get("__slots__", ())
    if isinstance(slots, str):
        return (slots,)
    return tuple(slots)


def _class_annotations(cls: type) -> Dict[str, Any]:
    annotations: Dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        annotations.update(inspect.get_annotations(klass))
    return annotations
