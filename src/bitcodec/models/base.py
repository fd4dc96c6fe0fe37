"""Base struct class and bitcodec-specific Pydantic configuration.

This module provides the BaseStruct class that composite types should inherit from.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict


class BaseStruct(BaseModel):
    """Base class for composite types encoded field by field.

    Fields are encoded in declaration order, each through the policy of its
    annotation. The field list is resolved when the class is created, so an
    unsupported field type raises SchemaError at definition time rather than
    on first use.

    bitcodec-specific options can be configured as ClassVar attributes:

    Example:
        >>> class Trio(BaseStruct):
        ...     a: UInt32
        ...     b: bool
        ...     c: Char
        ...
        ...     struct_max_bytes: ClassVar[Optional[int]] = 8

    Attributes:
        struct_max_bytes: Maximum encoded size in bytes (optional, checked by serialize)
    """

    model_config = ConfigDict(
        strict=False,
        # Custom codec types are plain classes
        arbitrary_types_allowed=True,
        # In-place decoding assigns field by field
        validate_assignment=True,
        extra="forbid",
    )

    struct_max_bytes: ClassVar[int | None] = None

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        """Resolve the encoding policy as soon as the class is complete."""
        super().__pydantic_init_subclass__(**kwargs)

        if cls.model_fields and cls.__pydantic_complete__:
            # Import here to avoid circular dependency
            from ..codec.resolver import resolve

            resolve(cls)
