"""
Converters - primitive conversion table and converter resolution for coercion targets
"""
import logging
import sys
from decimal import Decimal
from fractions import Fraction
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

Converter = Callable[[Any], Any]

#region: Errors

class UnsupportedTypeError(TypeError):
    """Exception raised when a target type offers no conversion strategy."""
    pass

class CoercionError(Exception):
    """
    Exception raised when a value written into a container cannot be coerced.

    Attributes:
        key: the key being written
        source_class: the runtime class of the rejected value
        target_type: the target type the value was coerced to
        message: the human readable description
    """

    def __init__(self, key: Any, source_class: type, target_type: Any, cause: Optional[BaseException] = None):
        self.key = key
        self.source_class = source_class
        self.target_type = target_type
        self.message = f"Cannot coerce property {key!r} from {_type_name(source_class)} to {_type_name(target_type)}"
        if cause is not None:
            self.message += f": {cause}"
        super().__init__(self.message)

def _type_name(tp: Any) -> str:
    if isinstance(tp, type):
        return tp.__qualname__
    return repr(tp)

#endregion

#region: Symbol

class Symbol(str):
    """
    An interned identifier string.

    Symbols compare and hash like the plain string they were made from,
    so they can be used interchangeably as dict keys.
    """
    __slots__ = ()

    def __new__(cls, value: str):
        if not isinstance(value, str):
            raise TypeError(f"Cannot convert {type(value).__name__} to a symbol")
        return super().__new__(cls, sys.intern(str(value)))

    def __repr__(self):
        return f"Symbol({str.__repr__(self)})"

def canonical_key(key: Any) -> Any:
    """
    Canonical form under which key rules are stored and looked up.
    Strings become Symbols, any other hashable key is kept as is.
    """
    if isinstance(key, str) and not isinstance(key, Symbol):
        return Symbol(key)
    return key

#endregion

#region: Primitive conversions

def _to_int(value: Any) -> int:
    """Like int(), but accepts strings such as '12.0' that denote whole numbers."""
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError("Empty string cannot be converted to int")
        try:
            return int(value)
        except ValueError:
            float_val = float(value)
            if float_val.is_integer():
                return int(float_val)
            raise ValueError(f"String {value!r} represents a non-integer number")
    return int(value)

def _to_float(value: Any) -> float:
    if isinstance(value, str):
        value = value.strip()
    return float(value)

def _to_complex(value: Any) -> complex:
    if isinstance(value, str):
        # complex() refuses surrounding spaces and spaces around the sign
        value = value.replace(" ", "")
    return complex(value)

def _to_fraction(value: Any) -> Fraction:
    if isinstance(value, str):
        value = value.strip()
    return Fraction(value)

def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, float):
        # go through repr so that 0.1 gives Decimal('0.1') rather than the binary expansion
        return Decimal(repr(value))
    if isinstance(value, str):
        value = value.strip()
    return Decimal(value)

_TRUTHY = ('true', '1', 'yes', 'on', 'y', 't')
_FALSY = ('false', '0', 'no', 'off', 'n', 'f', '')

def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUTHY:
            return True
        if word in _FALSY:
            return False
        raise ValueError(f"Cannot convert {value!r} to bool")
    return bool(value)

def _to_str(value: Any) -> str:
    return str(value)

CORE_TYPES: Dict[type, Converter] = {
    int: _to_int,
    float: _to_float,
    complex: _to_complex,
    Fraction: _to_fraction,
    str: _to_str,
    Symbol: Symbol,
    Decimal: _to_decimal,
    bool: _to_bool,
}

#endregion

#region: TypeConverterRegistry

class TypeConverterRegistry:
    """
    Resolves the function used to convert a raw value into a target type.

    Resolution order:
        1. exact primitive kinds (int, float, complex, Fraction, str, Symbol, Decimal, bool)
        2. types exposing a callable ``coerce`` attribute -> ``target.coerce(value)``
        3. any other class -> ``target(value)``
    Anything else raises UnsupportedTypeError.
    Primitive kinds are matched by identity only: a subclass of ``int`` is
    treated as a user type, never guessed as a primitive.
    """

    def __init__(self, core_types: Optional[Dict[type, Converter]] = None):
        self._core_types = dict(CORE_TYPES if core_types is None else core_types)

    def register(self, target: type, converter: Converter) -> None:
        """Add or replace the primitive conversion used for ``target``."""
        if not callable(converter):
            raise TypeError(f"Converter for {target!r} must be callable, got {type(converter)}")
        self._core_types[target] = converter
        logger.debug("Registered primitive converter for %r", target)

    def is_primitive(self, target: Any) -> bool:
        try:
            return target in self._core_types
        except TypeError:
            # unhashable targets are never primitives
            return False

    def resolve(self, target: Any) -> Converter:
        if self.is_primitive(target):
            return self._core_types[target]

        coerce_method = getattr(target, 'coerce', None)
        if callable(coerce_method):
            return lambda value: coerce_method(value)

        if isinstance(target, type):
            return lambda value: target(value)

        raise UnsupportedTypeError(f"{target!r} is not a coercible type")

    def convert(self, value: Any, target: Any) -> Any:
        """Resolve the converter for ``target`` and apply it to ``value``."""
        return self.resolve(target)(value)

#endregion

#region: Public API

_default_registry = None

def get_default_registry() -> TypeConverterRegistry:
    """
    Returns the process wide registry (created on first use).
    Used by every CoercionEngine that is not given a registry explicitly.
    """
    global _default_registry
    if _default_registry is None:
        _default_registry = TypeConverterRegistry()
    return _default_registry

def reset_default_registry():
    """
    Drops the process wide registry, discarding converters added with register().
    Mostly useful in tests.
    """
    global _default_registry
    _default_registry = None

#endregion
