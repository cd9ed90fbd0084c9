import re
from typing import Any, Optional

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

TRUTHY_TOKENS = {"1", "true", "on", "yes"}


def parse_leading_int(value: Any) -> Optional[int]:
    """Parse the integer prefix of a value, ignoring trailing garbage.

    ``"15abc"`` parses to 15, ``"  7"`` to 7 and ``"abc"`` to None. Integers
    pass through unchanged; booleans and other types yield None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def is_truthy(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUTHY_TOKENS
