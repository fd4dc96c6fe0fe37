"""Policy resolution.

Given any type, pick exactly one encoding policy. Rules are tried in a fixed
order and the first match wins:

0. ``Annotated`` types carrying Padding or BitField map straight onto the
   transcoder; IntType/FloatType select native widths; equal min/max length
   constraints make a container fixed-arity
1. Types defining both ``encode_bits`` and ``decode_bits``
2. Types defining only one of them (the other direction is disabled)
3. ``bool`` and integers
4. Enumerations
5. Floats (16, 32 or 64 bits)
6. Resizable containers: list, ``tuple[T, ...]``, bytes, bytearray, str
7. Fixed-arity containers: ``tuple[A, B]`` and length-constrained containers
8. Composites (pydantic models and dataclasses) with at least one field
9. Anything else is a SchemaError

Results depend only on the type, so they are computed once and cached for the
life of the process. Policies built while a struct is still being resolved are
staged and published together once the outermost struct completes, or
discarded if it fails.
"""

from __future__ import annotations

import enum
import logging
import threading
from typing import Annotated, Any, Dict, Iterable, get_args, get_origin

from pydantic.fields import FieldInfo

from ..exceptions import SchemaError
from ..models.fields import BitField, FloatType, IntType, Padding, int_type_of
from .policies import (
    BitFieldPolicy,
    BoolPolicy,
    ByteStringPolicy,
    CustomPolicy,
    EnumPolicy,
    FloatPolicy,
    IntegerPolicy,
    PaddingPolicy,
    Policy,
    SequencePolicy,
    StructPolicy,
    TuplePolicy,
)
from .schema import StructSchema, is_composite

_logger = logging.getLogger(__name__)

#: Underlying type of enums that do not declare ``__underlying__`` (C ``int``).
DEFAULT_ENUM_TYPE = IntType(32, signed=True)

_lock = threading.RLock()
_policies: Dict[Any, Policy] = {}
_schemas: Dict[type, StructSchema] = {}
# Structs whose fields are still being resolved, for self-reference.
_pending: Dict[Any, StructPolicy] = {}
# Results built while a struct is pending; published only once it completes.
_staged_policies: Dict[Any, Policy] = {}
_staged_schemas: Dict[type, StructSchema] = {}


def resolve(tp: Any) -> Policy:
    """Return the encoding policy for ``tp``.

    Args:
        tp: Any type or annotation (e.g. UInt32, list[Int8], a BaseStruct subclass)

    Returns:
        The policy shared by every value of that type

    Raises:
        SchemaError: If no policy applies
    """
    try:
        return _policies[tp]
    except KeyError:
        pass
    except TypeError:
        # Unhashable annotation metadata: resolve without caching.
        with _lock:
            return _resolve(tp)

    with _lock:
        for cache in (_policies, _staged_policies, _pending):
            if tp in cache:
                return cache[tp]
        policy = _store(_policies, _staged_policies, tp, _resolve(tp))
        _logger.debug("Resolved %r to %r", tp, policy)
        return policy


def struct_schema(struct_type: type) -> StructSchema:
    """Return the cached field decomposition of a composite type.

    Unlike :func:`resolve`, a composite with no fields is accepted and yields
    an empty schema.

    Raises:
        SchemaError: If the type is not a composite or a field cannot be resolved
    """
    try:
        return _schemas[struct_type]
    except KeyError:
        pass

    with _lock:
        for cache in (_schemas, _staged_schemas):
            if struct_type in cache:
                return cache[struct_type]
        schema = StructSchema.from_type(struct_type, resolve)
        return _store(_schemas, _staged_schemas, struct_type, schema)


def _store(published: Dict[Any, Any], staged: Dict[Any, Any], key: Any, value: Any) -> Any:
    # Anything built while a struct is pending may refer to its unfinished policy.
    target = staged if _pending else published
    return target.setdefault(key, value)


def _settle(completed: bool) -> None:
    """Publish or discard everything staged by the outermost struct."""
    if completed:
        for key, policy in _staged_policies.items():
            _policies.setdefault(key, policy)
        for key, schema in _staged_schemas.items():
            _schemas.setdefault(key, schema)
    _staged_policies.clear()
    _staged_schemas.clear()


def _resolve(tp: Any) -> Policy:
    if get_origin(tp) is Annotated:
        return _resolve_annotated(get_args(tp)[0], tp.__metadata__)

    if isinstance(tp, type) and (hasattr(tp, "encode_bits") or hasattr(tp, "decode_bits")):
        return CustomPolicy(tp)

    if tp is bool:
        return BoolPolicy()
    if tp is int:
        return IntegerPolicy(int_type_of(int))

    if isinstance(tp, type) and issubclass(tp, enum.Enum):
        return EnumPolicy(tp, _underlying_type(tp))

    if tp is float:
        return FloatPolicy(FloatType(64))

    container = _resolve_container(tp, None)
    if container is not None:
        return container

    if is_composite(tp):
        return _resolve_struct(tp)

    raise SchemaError(f"No encoding policy for type {tp!r}")


def _resolve_annotated(base: Any, metadata: Iterable[Any]) -> Policy:
    flat: list[Any] = []
    for meta in metadata:
        if isinstance(meta, FieldInfo):
            flat.extend(meta.metadata)
        else:
            flat.append(meta)

    for meta in reversed(flat):
        if isinstance(meta, Padding):
            return PaddingPolicy(meta)
        if isinstance(meta, BitField):
            return BitFieldPolicy(meta)

    for meta in reversed(flat):
        if isinstance(meta, IntType):
            if base is not int:
                raise SchemaError(f"IntType annotation on non-integer type {base!r}")
            return IntegerPolicy(meta)
        if isinstance(meta, FloatType):
            if base is not float:
                raise SchemaError(f"FloatType annotation on non-float type {base!r}")
            return FloatPolicy(meta)

    length = _fixed_length(flat)
    if length is not None:
        container = _resolve_container(base, length)
        if container is not None:
            return container

    return resolve(base)


def _fixed_length(metadata: Iterable[Any]) -> int | None:
    min_length = max_length = None
    for meta in metadata:
        if getattr(meta, "min_length", None) is not None:
            min_length = meta.min_length
        if getattr(meta, "max_length", None) is not None:
            max_length = meta.max_length
    if min_length is not None and min_length == max_length:
        return int(min_length)
    return None


def _resolve_container(tp: Any, length: int | None) -> Policy | None:
    if tp in (bytes, bytearray, str):
        return ByteStringPolicy(tp, length)

    origin = get_origin(tp)
    args = get_args(tp)

    if tp is list or origin is list:
        if not args:
            raise SchemaError("list needs an element type, e.g. list[UInt8]")
        return SequencePolicy(resolve(args[0]), list, length)

    if tp is tuple or origin is tuple:
        if not args:
            raise SchemaError("tuple needs element types, e.g. tuple[UInt8, ...]")
        if len(args) == 2 and args[1] is Ellipsis:
            return SequencePolicy(resolve(args[0]), tuple, length)
        if length is not None and length != len(args):
            raise SchemaError(f"Length {length} conflicts with {tp!r}")
        return TuplePolicy([resolve(arg) for arg in args])

    return None


def _resolve_struct(tp: type) -> StructPolicy:
    policy = StructPolicy(tp)
    _pending[tp] = policy
    completed = False
    try:
        schema = struct_schema(tp)
        if schema.field_count == 0:
            raise SchemaError(f"No encoding policy for {tp.__name__}: it has no fields")
        policy.attach(schema)
        completed = True
    finally:
        del _pending[tp]
        if not _pending:
            _settle(completed)
    return policy


def _underlying_type(enum_type: type[enum.Enum]) -> IntType:
    declared = getattr(enum_type, "__underlying__", None)
    if declared is None:
        return DEFAULT_ENUM_TYPE
    return int_type_of(declared)
