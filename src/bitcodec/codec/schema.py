"""Structural decomposition of composite types.

This module turns a composite type (a pydantic model or a dataclass) into an
ordered field list: each field's name, resolved policy and byte offset under
natural C layout. Field order is declaration order, read from the type's own
metadata, so no per-field registration is needed.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Annotated, Any, Callable, Tuple, get_type_hints

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from ..exceptions import SchemaError
from .policies import Policy, round_up


@dataclass(frozen=True)
class FieldSchema:
    """Schema information for a single field.

    Attributes:
        name: Field name
        annotation: Type annotation the policy was resolved from
        policy: Encoding policy of the field
        offset: Byte offset of the field under natural layout
    """

    name: str
    annotation: Any
    policy: Policy
    offset: int

    def bits_required(self) -> int | None:
        """Return the wire width of the field, or None if it varies."""
        return self.policy.bit_length


class StructSchema:
    """Ordered field list of a composite type.

    Example:
        >>> schema = StructSchema.from_type(Trio, resolve)
        >>> [(f.name, f.offset) for f in schema.fields]
        [('a', 0), ('b', 4), ('c', 5)]
    """

    def __init__(
        self, struct_type: type, fields: Tuple[FieldSchema, ...], size: int, alignment: int
    ) -> None:
        self.struct_type = struct_type
        self.fields = fields
        self.size = size
        self.alignment = alignment

    @classmethod
    def from_type(cls, struct_type: type, resolve: Callable[[Any], Policy]) -> StructSchema:
        """Decompose a composite type.

        Args:
            struct_type: Pydantic model class or dataclass
            resolve: Function mapping a field annotation to its policy

        Returns:
            StructSchema with fields in declaration order

        Raises:
            SchemaError: If the type is not a composite or a field type cannot be resolved
        """
        fields = []
        cursor = 0
        alignment = 1
        for name, annotation in declared_fields(struct_type):
            try:
                policy = resolve(annotation)
            except SchemaError as e:
                raise SchemaError(f"{struct_type.__name__}.{name}: {e}") from e
            cursor = round_up(cursor, policy.alignment)
            fields.append(
                FieldSchema(name=name, annotation=annotation, policy=policy, offset=cursor)
            )
            cursor += policy.size
            alignment = max(alignment, policy.alignment)

        size = max(round_up(cursor, alignment), 1)
        return cls(struct_type, tuple(fields), size, alignment)

    @property
    def field_count(self) -> int:
        return len(self.fields)

    def offsets(self) -> Tuple[int, ...]:
        """Return the byte offset of every field, in order."""
        return tuple(f.offset for f in self.fields)

    def total_bits(self) -> int | None:
        """Calculate total bits of the encoded struct.

        Returns:
            Total bits, or None if any field has a variable width
        """
        total = 0
        for field in self.fields:
            bits = field.bits_required()
            if bits is None:
                return None
            total += bits
        return total

    def total_bytes(self) -> int | None:
        """Calculate total encoded bytes (rounded up), or None if variable."""
        bits = self.total_bits()
        return None if bits is None else (bits + 7) // 8


def is_composite(tp: Any) -> bool:
    """Return True for pydantic model classes and dataclass types."""
    if not isinstance(tp, type):
        return False
    return issubclass(tp, BaseModel) or dataclasses.is_dataclass(tp)


def declared_fields(struct_type: type) -> list[tuple[str, Any]]:
    """Return (name, annotation) for every field of a composite, in order.

    Pydantic fields are rebuilt as ``Annotated[annotation, *metadata]`` so
    that width markers and length constraints survive pydantic's processing.

    Raises:
        SchemaError: If the type is not a composite
    """
    if isinstance(struct_type, type) and issubclass(struct_type, BaseModel):
        return [
            (name, _field_annotation(name, info))
            for name, info in struct_type.model_fields.items()
        ]

    if dataclasses.is_dataclass(struct_type):
        try:
            hints = get_type_hints(struct_type, include_extras=True)
        except (NameError, TypeError) as e:
            raise SchemaError(f"{struct_type.__name__}: cannot evaluate annotations: {e}") from e
        return [
            (field.name, hints.get(field.name, field.type))
            for field in dataclasses.fields(struct_type)
        ]

    raise SchemaError(f"{struct_type!r} is not a composite type")


def _field_annotation(name: str, info: FieldInfo) -> Any:
    annotation = info.annotation
    if annotation is None:
        raise SchemaError(f"Field {name} has no type annotation")
    if not info.metadata:
        return annotation
    return Annotated[(annotation, *info.metadata)]  # type: ignore[valid-type]


