"""
Coercion rule sets.

Two kinds of rules decide which target type a written value is coerced to:

    - key rules, bound to a named key (KeyCoercionRules)
    - value rules, bound to the runtime class of the value (ValueCoercionRules)

Value rules come in two tiers. Strict rules match the exact class of the value.
Lenient rules match the declared class and its subclasses; the subclasses are
enumerated when the rule is registered, so lookups stay a single dict access
on ``type(value)``.
"""
import logging
import numbers
from decimal import Decimal
from fractions import Fraction
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple

from ._converters import canonical_key

logger = logging.getLogger(__name__)

# Abstract numeric categories and the concrete classes they expand to.
# bool is deliberately left out of the integer family.
ABSTRACT_CORE_TYPES: Dict[type, Tuple[type, ...]] = {
    numbers.Integral: (int,),
    numbers.Rational: (int, Fraction),
    numbers.Real: (int, float, Fraction),
    numbers.Complex: (int, float, complex, Fraction),
    numbers.Number: (int, float, complex, Fraction, Decimal),
}


class KeyCoercionRules:
    """
    Mapping of canonical key -> target type.

    Keys are canonicalized (strings become Symbols) both when a rule is
    registered and when it is looked up, so 'user' and Symbol('user') designate
    the same rule.
    """

    def __init__(self, rules: Optional[Dict[Any, Any]] = None):
        self._rules: Dict[Any, Any] = dict(rules) if rules else {}

    def register(self, keys: Iterable[Any], into: Any) -> None:
        for key in keys:
            self._rules[canonical_key(key)] = into
            logger.debug("Key rule %r -> %r", key, into)

    def lookup(self, key: Any) -> Any:
        try:
            return self._rules.get(canonical_key(key))
        except TypeError:
            # unhashable keys can't carry a rule
            return None

    def snapshot(self) -> "KeyCoercionRules":
        """Independent copy, handed to subclasses when they are defined."""
        return KeyCoercionRules(self._rules)

    def update(self, other: "KeyCoercionRules") -> None:
        self._rules.update(other._rules)

    def as_dict(self) -> Dict[Any, Any]:
        return dict(self._rules)

    def __contains__(self, key):
        return self.lookup(key) is not None

    def __len__(self):
        return len(self._rules)

    def __repr__(self):
        return f"{type(self).__name__}({self._rules!r})"


def iter_subclasses(cls: type) -> Iterator[type]:
    """Yield cls and all its currently defined subclasses, each one once."""
    seen = set()
    stack = [cls]
    while stack:
        current = stack.pop()
        if current in seen:
            continue
        seen.add(current)
        yield current
        stack.extend(type.__subclasses__(current))


class ValueCoercionRules:
    """
    Strict and lenient value class -> target type tables.
    """

    def __init__(self):
        self.strict: Dict[type, Any] = {}
        self.lenient: Dict[type, Any] = {}

    def register(self, from_class: type, into: Any, strict: bool = True) -> None:
        """
        Register a rule coercing values of ``from_class`` into ``into``.

        Args:
            from_class: the class of the values to coerce, or an abstract numeric
                category from the ``numbers`` module (expanded to its concrete members)
            into: the target type
            strict: when True only exact instances of from_class match; otherwise
                from_class and every subclass defined so far match too
        """
        if from_class in ABSTRACT_CORE_TYPES:
            for member in ABSTRACT_CORE_TYPES[from_class]:
                self.register(member, into, strict=strict)
            return

        if not isinstance(from_class, type):
            raise TypeError(f"Value rules are keyed by class, got {from_class!r}")

        if strict:
            self.strict[from_class] = into
            logger.debug("Strict value rule %s -> %r", from_class.__qualname__, into)
            return

        if from_class is object:
            raise ValueError("A lenient value rule cannot be registered for object")

        for cls in iter_subclasses(from_class):
            self.lenient[cls] = into
        logger.debug("Lenient value rule %s -> %r", from_class.__qualname__, into)

    def lookup(self, value: Any) -> Any:
        from_class = type(value)
        into = self.strict.get(from_class)
        if into is None:
            into = self.lenient.get(from_class)
        return into

    def __len__(self):
        return len(self.strict) + len(self.lenient)

    def __repr__(self):
        return f"{type(self).__name__}(strict={self.strict!r}, lenient={self.lenient!r})"
