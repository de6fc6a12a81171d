from enum import Enum
from typing import Any, Dict, Iterable

from estatelink.exceptions import ValidationError


def plain_changes(changes: Dict[str, Any], required: Iterable[str] = ()) -> Dict[str, Any]:
    """
    Unwrap enum members to their stored values and refuse nulls for
    columns that cannot hold them. Key order is preserved.
    """
    required = set(required)
    result = {}
    for key, value in changes.items():
        if value is None and key in required:
            raise ValidationError(f"{key} cannot be null")
        result[key] = value.value if isinstance(value, Enum) else value
    return result
