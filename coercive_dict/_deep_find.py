from typing import Any, List, Optional

from ._collections_utils import deep_locate


class DeepFind:
    """
    Mixin searching nested mappings and sequences for a key.

    Example:
        >>> class Options(DeepFind, dict):
        ...     pass
        >>> options = Options(user={"location": {"address": "123 Street"}})
        >>> options.deep_find("address")
        '123 Street'
    """

    def deep_find(self, key: Any) -> Any:
        """
        Performs a depth-first search for ``key`` and returns the value of
        its first occurrence, None if the key is found nowhere.
        """
        matches = self._deep_find_all(key)
        return matches[0] if matches else None

    deep_detect = deep_find

    def deep_find_all(self, key: Any) -> Optional[List[Any]]:
        """
        Performs a depth-first search for ``key`` and returns the values of
        all its occurrences, None if the key is found nowhere.

            options = {"users": [{"location": {"address": "123 Street"}},
                                 {"location": {"address": "234 Street"}}]}
            options.deep_find_all("address")  # ['123 Street', '234 Street']
        """
        matches = self._deep_find_all(key)
        return matches or None

    deep_select = deep_find_all

    def _deep_find_all(self, key: Any) -> List[Any]:
        return [mapping[key] for mapping in deep_locate(self, key)]
