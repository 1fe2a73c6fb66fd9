"""Helpers for YAML parsing quirks."""

from typing import Any, Dict, TypeVar

V = TypeVar("V")


def normalize_yaml_dict_keys(data: Dict[Any, V]) -> Dict[str, V]:
    """Return ``data`` with every key coerced to ``str``.

    YAML 1.1 turns keys such as ``yes``/``no``/``on``/``off`` into booleans and
    bare numbers into ints. Configuration sections are looked up by string
    name, so those keys become ``"True"``, ``"False"``, ``"10"`` and so on.

    Examples:
        >>> normalize_yaml_dict_keys({True: 1, 10: 2, "stats": 3})
        {'True': 1, '10': 2, 'stats': 3}
    """
    return {str(key): value for key, value in data.items()}
