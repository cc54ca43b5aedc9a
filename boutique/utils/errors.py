from typing import Any, Dict, List


def validation_message(errors: List[Dict[str, Any]]) -> str:
    """Turn the first request-validation error into a single readable message."""
    if not errors:
        return "Invalid request"

    error = errors[0]
    loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query")]
    field = ".".join(loc)

    if not field:
        return "Invalid request body"
    if error.get("type") == "missing":
        return f"{field} is required"
    return f"{field}: {error.get('msg', 'invalid value')}"
