"""Public package exports for ``coercive_dict``.

Mixins for dict-like containers:

    - ``Coercion`` / ``cdict``: values are coerced into declared types as they are written
    - ``DeepFind``: depth-first search of a key through nested mappings and sequences
"""

from ._converters import (
    CoercionError,
    UnsupportedTypeError,
    Symbol,
    TypeConverterRegistry,
    get_default_registry,
    reset_default_registry,
)
from ._rules import ABSTRACT_CORE_TYPES, KeyCoercionRules, ValueCoercionRules
from ._engine import CoercionEngine, MocksType
from ._coercion_meta import CoercionConfig, CoercionMeta
from ._cdict import Coercion, cdict, include_coercion
from ._deep_find import DeepFind
from ._collections_utils import MISSING, deep_locate

__all__ = [
    "CoercionError",
    "UnsupportedTypeError",
    "Symbol",
    "TypeConverterRegistry",
    "get_default_registry",
    "reset_default_registry",
    "ABSTRACT_CORE_TYPES",
    "KeyCoercionRules",
    "ValueCoercionRules",
    "CoercionEngine",
    "MocksType",
    "CoercionConfig",
    "CoercionMeta",
    "Coercion",
    "cdict",
    "include_coercion",
    "DeepFind",
    "MISSING",
    "deep_locate",
]
