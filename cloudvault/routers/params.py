from typing import Optional

from cloudvault.core.errors import BadRequestError


def optional_id(raw: Optional[str], name: str) -> Optional[int]:
    """Parse an optional id from a query or form field; ``"null"`` and ``""`` mean none."""
    if raw is None or raw.strip() in ("", "null"):
        return None
    try:
        return int(raw)
    except ValueError:
        raise BadRequestError(f"{name} must be an integer")
