import inspect
import logging
import typing
from dataclasses import dataclass, field, fields, MISSING as DC_MISSING
from typing import Any, Dict, FrozenSet

from ._rules import KeyCoercionRules

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoercionConfig:
    """
    Class level settings of a coercing container.

    strict: default tier used by coerce_value() when no strict flag is given
    coerce_on_init: coerce the entries passed to the constructor
    """
    strict: bool = True
    coerce_on_init: bool = True

    # fields passed explicitly to __init__
    _explicit: FrozenSet[str] = field(default_factory=frozenset, init=False, repr=False, compare=False)

    def __init__(self, **kwargs):
        unknown = set(kwargs) - {f.name for f in fields(self) if f.name != "_explicit"}
        if unknown:
            raise TypeError(f"Unknown config option(s): {sorted(unknown)}")

        object.__setattr__(self, "_explicit", frozenset(kwargs.keys()))

        for f in fields(self):
            if f.name == "_explicit":
                continue
            if f.name in kwargs:
                value = kwargs[f.name]
            elif f.default is not DC_MISSING:
                value = f.default
            else:
                value = f.default_factory()  # type: ignore[misc]
            object.__setattr__(self, f.name, value)

    @classmethod
    def _from_values(cls, values: Dict[str, object], explicit: FrozenSet[str]) -> "CoercionConfig":
        """Internal constructor bypassing __init__ to control both the values and _explicit."""
        self = object.__new__(cls)
        for f in fields(cls):
            if f.name == "_explicit":
                continue
            object.__setattr__(self, f.name, values[f.name])
        object.__setattr__(self, "_explicit", explicit)
        return self

    def merge(self, other: "CoercionConfig") -> "CoercionConfig":
        """
        Like dict.update:
        - fields explicitly set in `other` override those of `self`
        - the others keep the value of `self`
        - the explicit fields of the result are the union of both
        """
        merged_values: Dict[str, object] = {}

        for f in fields(self):
            if f.name == "_explicit":
                continue
            if f.name in other._explicit:
                merged_values[f.name] = getattr(other, f.name)
            else:
                merged_values[f.name] = getattr(self, f.name)

        return CoercionConfig._from_values(merged_values, self._explicit | other._explicit)


def annotated_key_rules(cls: type) -> Dict[str, Any]:
    """
    Public class annotations, read as key rules:

        class Tweet(cdict):
            user: User
            tags: set[str]
    """
    rules = {}
    for key, hint in inspect.get_annotations(cls).items():
        if key.startswith('_'):
            continue
        if typing.get_origin(hint) is typing.ClassVar or hint is typing.ClassVar:
            continue
        if isinstance(hint, str):
            raise TypeError(
                f"{cls.__qualname__}.{key}: string annotations can't be used as coercion targets, "
                f"got {hint!r}"
            )
        rules[key] = hint
    return rules


class CoercionMeta(type):
    """
    Metaclass of coercing containers.

    When a class statement runs it:
        - gives the class a copy of its bases' key rules (leftmost base wins),
          then adds the rules declared through annotations
        - merges the bases' configurations and the class's own _config
    Value rules are not inherited; they are created on first access by each class.
    """

    def __new__(mcls, name, bases, dct):

        # Snapshot of the parents' key rules, a later change to a parent won't propagate
        key_rules = KeyCoercionRules()
        for base in reversed(bases):
            base_rules = getattr(base, '_key_coercions', None)
            if isinstance(base_rules, KeyCoercionRules):
                key_rules.update(base_rules.snapshot())
        dct['_key_coercions'] = key_rules

        parent_config = None

        # The leftmost base (in class X(A, B)) wins
        for base in reversed(bases):
            base_conf = getattr(base, '_config', None)
            if not isinstance(base_conf, CoercionConfig):
                continue
            if parent_config is None:
                parent_config = base_conf
            else:
                parent_config = parent_config.merge(base_conf)

        if '_config' in dct:
            local_config = dct['_config']
            if not isinstance(local_config, CoercionConfig):
                raise TypeError(
                    f"_config must be a CoercionConfig instance created via cdict.config(), "
                    f"got {type(local_config)}. Use: _config = cdict.config(strict=False, ...)"
                )
            effective_config = parent_config.merge(local_config) if parent_config is not None else local_config
        else:
            effective_config = parent_config if parent_config is not None else CoercionConfig()

        dct['_config'] = effective_config

        cls = super().__new__(mcls, name, bases, dct)

        declared = annotated_key_rules(cls)
        for key, into in declared.items():
            key_rules.register([key], into)
        if declared:
            logger.debug("%s declares key rules for %s", name, sorted(declared))

        return cls
