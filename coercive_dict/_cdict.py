from collections.abc import Mapping
from typing import Any, Dict, Iterable, Optional

from ._coercion_meta import CoercionMeta, CoercionConfig, annotated_key_rules
from ._collections_utils import MISSING
from ._engine import CoercionEngine
from ._rules import KeyCoercionRules, ValueCoercionRules


class Coercion(metaclass=CoercionMeta):
    """
    Mixin coercing values as they are written into a mapping.

    Put it before the mapping class in the bases; writes are coerced and then
    handed to the next __setitem__ in the MRO.

    Rules are declared on the class:
        - key rules: ``coerce_key('user', User)`` or a class annotation ``user: User``
        - value rules: ``coerce_value(dict, SpecialBox)`` (strict) or
          ``coerce_value(Vehicle, Garage, strict=False)`` (Vehicle and its subclasses)

    A key rule always wins over a value rule.
    """

    @classmethod
    def config(cls, **kwargs) -> CoercionConfig:
        """
        Creates a CoercionConfig for use in subclasses.

        Usage:
            class Lenient(cdict):
                _config = cdict.config(strict=False)

        Args:
            strict: default tier of coerce_value() rules
            coerce_on_init: coerce the entries passed to the constructor
        """
        return CoercionConfig(**kwargs)

    # rule declaration

    @classmethod
    def coerce_key(cls, *keys, into: Any = MISSING) -> None:
        """
        Set up a coercion rule such that any time one of the keys is set
        its value is coerced into the given type.

        The target is either passed as ``into=`` or as the last positional argument.

        Example: coerce a "user" sub-dict into a User object
            class Tweet(cdict):
                pass
            Tweet.coerce_key('user', User)
        """
        if into is MISSING:
            if len(keys) < 2:
                raise TypeError("coerce_key() expects at least one key and a target type")
            *keys, into = keys
        if not keys:
            raise TypeError("coerce_key() expects at least one key")
        if into is None:
            raise ValueError("coerce_key() target type can't be None")
        cls.key_coercions().register(keys, into)

    coerce_keys = coerce_key

    @classmethod
    def key_coercions(cls) -> KeyCoercionRules:
        """Key rules of this class (inherited ones included)."""
        return cls._key_coercions

    @classmethod
    def key_coercion(cls, key: Any) -> Any:
        """The target type bound to ``key``, None if there is none."""
        return cls._key_coercions.lookup(key)

    @classmethod
    def coerce_value(cls, from_class: type, into: Any, strict: Optional[bool] = None) -> None:
        """
        Set up a coercion rule such that any time a value of ``from_class``
        is set it is coerced into ``into``.

        Args:
            from_class: class of the values to coerce, or a category of the
                numbers module (numbers.Integral, numbers.Number, ...)
            into: target type
            strict: exact class only (True) or also the subclasses of from_class
                defined so far (False). Defaults to the class config.

        Example: coerce every plain dict into a SpecialBox
            Box.coerce_value(dict, SpecialBox)
        """
        if into is None:
            raise ValueError("coerce_value() target type can't be None")
        if strict is None:
            strict = cls._config.strict
        cls._value_rules().register(from_class, into, strict=strict)

    @classmethod
    def strict_value_coercions(cls) -> Dict[type, Any]:
        return cls._value_rules().strict

    @classmethod
    def lenient_value_coercions(cls) -> Dict[type, Any]:
        return cls._value_rules().lenient

    @classmethod
    def value_coercion(cls, value: Any) -> Any:
        """The target type bound to the class of ``value``, None if there is none."""
        return cls._value_rules().lookup(value)

    @classmethod
    def _value_rules(cls) -> ValueCoercionRules:
        # looked up in the class's own namespace, value rules aren't inherited
        rules = cls.__dict__.get('_value_coercions')
        if rules is None:
            rules = ValueCoercionRules()
            setattr(cls, '_value_coercions', rules)
        return rules

    @classmethod
    def coercion_engine(cls) -> CoercionEngine:
        engine = cls.__dict__.get('_engine')
        if engine is None:
            engine = CoercionEngine(cls._key_coercions, cls._value_rules())
            setattr(cls, '_engine', engine)
        return engine

    # writes

    def __setitem__(self, key, value):
        type(self).coercion_engine().set(key, value, super().__setitem__)

    def coerced(self, key: Any, value: Any) -> Any:
        """Returns what would be stored for ``value`` under ``key``, without storing it."""
        return type(self).coercion_engine().convert(key, value)

    def _coerce_all(self, pairs: Iterable) -> list:
        """Coerces every pair before anything is written."""
        engine = type(self).coercion_engine()
        return [(key, engine.convert(key, value)) for key, value in pairs]

    def _write_all(self, pairs: Iterable) -> None:
        write = super().__setitem__
        for key, value in self._coerce_all(pairs):
            write(key, value)

    def replace(self, other: Mapping):
        """
        Makes the content equal to ``other``: keys missing from it are
        dropped and its entries are written through coercion.
        """
        coerced = self._coerce_all(other.items())
        for key in [k for k in self.keys() if k not in other]:
            del self[key]
        write = super().__setitem__
        for key, value in coerced:
            write(key, value)
        return self


def _pairs(*args, **kwargs) -> list:
    """Entries of dict(*args, **kwargs) arguments, in order, duplicates kept."""
    if len(args) > 1:
        raise TypeError(f"expected at most 1 positional argument, got {len(args)}")
    pairs = []
    if args:
        other = args[0]
        if isinstance(other, Mapping):
            pairs.extend((key, other[key]) for key in other)
        elif hasattr(other, 'keys'):
            pairs.extend((key, other[key]) for key in other.keys())
        else:
            for item in other:
                key, value = item
                pairs.append((key, value))
    pairs.extend(kwargs.items())
    return pairs


class cdict(Coercion, dict):
    """
    A dict coercing the values written into it.
    (All native dict methods are supported, and every write path is coerced)

    Example:
        >>> class Tweet(cdict):
        ...     user: User
        >>> tweet = Tweet(user={"name": "a"})
        >>> type(tweet["user"])
        <class 'User'>
        >>> Tweet.coerce_value(int, str)
        >>> tweet["count"] = 5
        >>> tweet["count"]
        '5'
    """

    def __init__(self, *args, **kwargs):
        if type(self)._config.coerce_on_init:
            super().__init__()
            self._write_all(_pairs(*args, **kwargs))
        else:
            super().__init__(*args, **kwargs)

    def update(self, *args, **kwargs):
        self._write_all(_pairs(*args, **kwargs))

    def setdefault(self, key, default=None):
        if key in self:
            return self[key]
        self[key] = default
        return dict.__getitem__(self, key)

    def copy(self):
        # stored values are already coerced, copied as they are
        new = type(self).__new__(type(self))
        dict.update(new, self)
        return new

    @classmethod
    def fromkeys(cls, iterable, value=None):
        return cls((key, value) for key in iterable)

    def __or__(self, other):
        if not isinstance(other, Mapping):
            return NotImplemented
        result = self.copy()
        result.update(other)
        return result

    def __ior__(self, other):
        if not isinstance(other, Mapping):
            return NotImplemented
        self.update(other)
        return self

    def __repr__(self):
        return f"{self.__class__.__name__}({dict.__repr__(self)})"


def include_coercion(container_type: type) -> type:
    """
    Returns a subclass of ``container_type`` whose writes are coerced.
    Usable as a class decorator:

        @include_coercion
        class Settings(collections.UserDict):
            pass
        Settings.coerce_key('port', int)

    dict subclasses get the complete cdict write surface (update, setdefault, |=, ...);
    other mappings get __setitem__ intercepted, which MutableMapping based
    classes also use for their bulk writes.
    """
    if not isinstance(container_type, type):
        raise TypeError(f"include_coercion() expects a class, got {container_type!r}")
    if issubclass(container_type, Coercion):
        return container_type
    if not hasattr(container_type, '__setitem__'):
        raise TypeError(f"{container_type.__qualname__} has no __setitem__ to intercept")

    mixin = cdict if issubclass(container_type, dict) else Coercion

    meta = type(container_type)
    if not issubclass(meta, CoercionMeta):
        if issubclass(CoercionMeta, meta):
            meta = CoercionMeta
        else:
            # e.g. ABCMeta for collections.UserDict
            meta = type(f"Coercion{meta.__name__}", (CoercionMeta, meta), {})

    namespace = {
        '__module__': container_type.__module__,
        '__qualname__': container_type.__qualname__,
        '__doc__': container_type.__doc__,
    }
    coercing = meta(container_type.__name__, (mixin, container_type), namespace)
    for key, into in annotated_key_rules(container_type).items():
        coercing.coerce_key(key, into)
    return coercing
