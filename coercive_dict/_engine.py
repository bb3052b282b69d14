"""
CoercionEngine - the write-time coercion pipeline.

    set(key, value, write)
        target = key rule, else value rule
        converted = coerce(value, target)
        write(key, converted)

Any failure while resolving or converting surfaces as a CoercionError and
nothing is written.
"""
import collections
import collections.abc
import inspect
import logging
import types
import typing
from typing import Any, Callable, Optional, Protocol, Tuple, get_args, get_origin, runtime_checkable

from ._converters import CoercionError, TypeConverterRegistry, get_default_registry
from ._rules import KeyCoercionRules, ValueCoercionRules

logger = logging.getLogger(__name__)

Writer = Callable[[Any, Any], None]


@runtime_checkable
class MocksType(Protocol):
    """
    Optional capability for stand-in objects (test doubles and the like).

    A value implementing ``mocks_a`` is left alone when ``mocks_a(target)``
    returns True, as if it were a real instance of the target type.
    """

    def mocks_a(self, into: Any) -> bool:
        ...


# Abstract origins are rebuilt as their natural concrete type
_ORIGIN_TO_TYPE = {
    collections.abc.Mapping: dict,
    collections.abc.MutableMapping: dict,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Collection: list,
    collections.abc.Iterable: list,
    collections.abc.Set: frozenset,
    collections.abc.MutableSet: set,
}

_NO_COERCION = (None, type(None), typing.Any)

_UNION_ORIGINS = (typing.Union, types.UnionType)


def collection_origin(target: Any) -> Optional[type]:
    """Returns the container class of a parametrized collection type, None otherwise."""
    origin = get_origin(target)
    if not isinstance(origin, type):
        return None
    if issubclass(origin, (collections.abc.Mapping, collections.abc.Iterable)) and not issubclass(origin, (str, bytes, bytearray)):
        return origin
    return None


def is_transform(target: Any) -> bool:
    # typing constructs (Optional[int], Literal[...], list[int], ...) are callable too
    return callable(target) and not isinstance(target, type) and get_origin(target) is None


class CoercionEngine:
    """
    Applies key and value rules to the values written into a container.

    Args:
        key_rules: rules bound to keys, they take precedence
        value_rules: rules bound to the class of the written value
        registry: converter registry (the process wide one by default)
    """

    def __init__(self, key_rules: KeyCoercionRules, value_rules: ValueCoercionRules,
                 registry: Optional[TypeConverterRegistry] = None):
        self.key_rules = key_rules
        self.value_rules = value_rules
        self._registry = registry

    @property
    def registry(self) -> TypeConverterRegistry:
        if self._registry is None:
            return get_default_registry()
        return self._registry

    def target_for(self, key: Any, value: Any) -> Any:
        into = self.key_rules.lookup(key)
        if into is None:
            into = self.value_rules.lookup(value)
        return into

    def convert(self, key: Any, value: Any) -> Any:
        """Coerce ``value`` as it would be stored under ``key``, without writing it."""
        into = None
        try:
            into = self.target_for(key, value)
            return self.coerce(value, into)
        except Exception as e:
            logger.debug("Coercion of %r failed: %s", key, e)
            raise CoercionError(key, type(value), into, e) from e

    def set(self, key: Any, value: Any, write: Writer) -> None:
        write(key, self.convert(key, value))

    #region: coercion

    def coerce(self, value: Any, into: Any) -> Any:
        if not self.should_coerce(value, into):
            return value

        origin = collection_origin(into)
        if origin is not None:
            if issubclass(origin, collections.abc.Mapping):
                return self._coerce_mapping(value, into, origin)
            if issubclass(origin, tuple):
                return self._coerce_tuple(value, into)
            return self._coerce_collection(value, into, origin)

        origin = get_origin(into)
        if origin in _UNION_ORIGINS:
            return self._coerce_union(value, into)
        if origin is typing.Annotated:
            return self.coerce(value, get_args(into)[0])
        if origin is typing.Literal:
            return self._coerce_literal(value, into)
        if isinstance(origin, type):
            # a parametrized user generic, e.g. Box[int]
            return self.coerce(value, origin)

        if is_transform(into):
            return into(value)

        return self.registry.resolve(into)(value)

    def should_coerce(self, value: Any, into: Any) -> bool:
        if value is None or into in _NO_COERCION:
            return False
        return not self.should_skip(value, into)

    def should_skip(self, value: Any, into: Any) -> bool:
        if collection_origin(into) is not None or is_transform(into):
            return False
        if isinstance(into, type) and isinstance(value, into):
            return True
        if isinstance(value, MocksType) and value.mocks_a(into):
            return True
        return False

    def _coerce_union(self, value: Any, into: Any) -> Any:
        """Keeps a value matching one of the arms, otherwise the first arm accepting it wins."""
        arms = [arm for arm in get_args(into) if arm is not type(None)]
        if typing.Any in arms or any(self.should_skip(value, arm) for arm in arms):
            return value
        errors = []
        for arm in arms:
            try:
                return self.coerce(value, arm)
            except Exception as e:
                errors.append(e)
        raise TypeError(f"{value!r} matches none of {into}: {errors[-1]}") from errors[-1]

    def _coerce_literal(self, value: Any, into: Any) -> Any:
        if value not in get_args(into):
            raise ValueError(f"{value!r} is not one of {get_args(into)}")
        return value

    def _coerce_mapping(self, value: Any, into: Any, origin: type) -> Any:
        if not hasattr(value, 'items'):
            raise TypeError(f"Expected a mapping, got {type(value).__name__}")
        args = get_args(into)
        key_type = args[0] if args else None
        value_type = args[-1] if args else None
        pairs = [(self.coerce(k, key_type), self.coerce(v, value_type)) for k, v in value.items()]
        return self._build(origin, pairs)

    def _coerce_collection(self, value: Any, into: Any, origin: type) -> Any:
        self._check_iterable(value)
        args = get_args(into)
        elem_type = args[0] if args else None
        return self._build(origin, [self.coerce(item, elem_type) for item in value])

    def _coerce_tuple(self, value: Any, into: Any) -> Tuple:
        self._check_iterable(value)
        args = get_args(into)
        items = list(value)
        if not args:
            return tuple(items)
        # tuple[()]
        if len(args) == 1 and args[0] == ():
            if items:
                raise ValueError(f"Expected an empty tuple, got {len(items)} elements")
            return ()
        # tuple[T, ...]
        if len(args) == 2 and args[1] is Ellipsis:
            return tuple(self.coerce(item, args[0]) for item in items)
        if len(items) != len(args):
            raise ValueError(f"Expected a tuple of length {len(args)}, got {len(items)}")
        return tuple(self.coerce(item, tp) for item, tp in zip(items, args))

    def _check_iterable(self, value: Any) -> None:
        if isinstance(value, (str, bytes, bytearray, collections.abc.Mapping)) or not isinstance(value, collections.abc.Iterable):
            raise TypeError(f"Expected a sequence or set, got {type(value).__name__}")

    def _build(self, origin: type, items: list) -> Any:
        target_type = _ORIGIN_TO_TYPE.get(origin, origin)
        if inspect.isabstract(target_type):
            # Iterator, Generator, Reversible, KeysView... are rebuilt as plain containers
            if issubclass(target_type, collections.abc.Mapping):
                target_type = dict
            elif issubclass(target_type, collections.abc.Set):
                target_type = frozenset
            else:
                target_type = list
        if target_type is collections.defaultdict:
            return collections.defaultdict(None, items)
        return target_type(items)

    #endregion
