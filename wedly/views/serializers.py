from typing import Any


def serialize(value: Any) -> Any:
    """Make Firestore data JSON safe: datetimes (and Timestamps) become ISO strings."""
    if isinstance(value, dict):
        return {key: serialize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize(item) for item in value]
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value
