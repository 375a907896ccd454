from typing import Any, Dict, List, Optional


def _clean_list(values: List[Any]) -> List[Any]:
    cleaned: List[Any] = []
    for item in values:
        if isinstance(item, str):
            item = item.strip()
        elif isinstance(item, dict):
            item = cleanup(item)
        elif isinstance(item, (list, tuple)):
            item = _clean_list(list(item))
        if is_empty(item):
            continue
        cleaned.append(item)
    return cleaned


def is_empty(value: Any) -> bool:
    """True for None, blank strings and empty containers."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def clean_value(value: Any) -> Optional[Any]:
    """Cleaned copy of a single value, or None when nothing is left."""
    if isinstance(value, dict):
        value = cleanup(value)
    elif isinstance(value, (list, tuple)):
        value = _clean_list(list(value))
    return None if is_empty(value) else value


def cleanup(record: Dict[str, Any]) -> Dict[str, Any]:
    """Returns a copy of `record` without empty placeholders.

    Drops None, all-whitespace strings, lists left empty once their string
    elements are trimmed, and dicts left empty after the same cleanup is
    applied to them. Non-blank scalar strings are kept as they are.
    """
    cleaned: Dict[str, Any] = {}
    for key, value in record.items():
        value = clean_value(value)
        if value is not None:
            cleaned[key] = value
    return cleaned
