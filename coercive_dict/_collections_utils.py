"""Collections utilities for nested data structures.

Helpers to traverse nested Mappings (like dictionaries) and Sequences (like lists)
in a uniform way, used by the deep search mixin.

Main Components:
    - MISSING: Sentinel value for distinguishing missing values from None
    - keys(), unroll(): uniform key / (key, value) iteration over containers
    - deep_locate(): depth-first search of the mappings holding a given key

Typical Usage:
    >>> data = {"users": [{"name": "Alice"}, {"name": "Bob"}]}
    >>> [m["name"] for m in deep_locate(data, "name")]
    ['Alice', 'Bob']

Notes:
    - Strings, bytes and bytearrays are treated as leaves, not containers
    - Sets and frozensets are traversed like sequences (they have no keys)
"""

from collections.abc import Mapping, Sequence, Set as AbstractSet
from typing import Any, Iterator, List, Optional, Tuple, Type, TypeAlias, Union

Key: TypeAlias = Any  # Mapping keys or sequence indices
Container: TypeAlias = Union[Mapping, Sequence, AbstractSet]

class _MISSING:
    """Sentinel class representing a missing value.

    Used instead of None when None is a valid value. This helps distinguish
    between "no value given" and "value explicitly set to None".
    """
    def __str__(self)->str:
        return "MISSING"

    def __repr__(self)->str:
        return "MISSING"

    def __bool__(self)->bool:
        return False

# Sentinel instance
MISSING=_MISSING()

def is_container(obj:Any, excluded:Optional[Tuple[Type,...]]=None)->bool:
    """Test if an object is a container (but not an excluded type).

    Args:
        obj: Object to test
        excluded: Types to not consider as containers (default: str, bytes, bytearray)

    Returns:
        True if obj is a non-excluded Mapping, Sequence or Set
    """
    excluded= excluded if excluded is not None else (str,bytes,bytearray)
    return isinstance(obj,(Mapping,Sequence,AbstractSet)) and not isinstance(obj,excluded)

def keys(obj:Container)-> Iterator[Key]:
    """Yield possible keys or indices of a container.

    Raises:
        TypeError: If obj is not a Mapping or Sequence
    """
    if isinstance(obj,Mapping):
        yield from obj.keys()
    elif isinstance(obj,Sequence):
        yield from range(len(obj))
    else:
        raise TypeError(f"Expected a Mapping or Sequence container, got {type(obj)}")

def unroll(obj: Container) -> Iterator[Tuple[Key, Any]]:
    """Yield (key, value) pairs from a container.

    Sets have no keys, their items are yielded with their position in iteration order.

    Raises:
        TypeError: If obj is not a container
    """
    if not is_container(obj):
        raise TypeError(f"Expected a Mapping, Sequence or Set container, got {type(obj)}")
    if isinstance(obj,AbstractSet):
        yield from enumerate(obj)
        return
    for key in keys(obj):
        yield key,obj[key]

def has_key(obj:Mapping,key:Key)->bool:
    try:
        return key in obj
    except TypeError:
        # unhashable key
        return False

def deep_locate(obj:Any, key:Key) -> List[Mapping]:
    """Return every mapping holding `key`, in depth-first pre-order.

    A mapping is reported before the mappings nested in it. Containers reached
    several times (shared or self-referencing structures) are visited once.

    Examples:
        >>> data = {"a": 1, "b": [{"a": 2}, {"c": {"a": 3}}]}
        >>> [m["a"] for m in deep_locate(data, "a")]
        [1, 2, 3]
    """
    found=[]
    seen=set()

    def _locate(obj:Any)->None:
        if not is_container(obj) or id(obj) in seen:
            return
        seen.add(id(obj))
        if isinstance(obj,Mapping) and has_key(obj,key):
            found.append(obj)
        for _, value in unroll(obj):
            _locate(value)

    _locate(obj)
    return found
