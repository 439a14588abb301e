def normalize_keystroke(payload) -> str | None:
    """Return the payload if it is a single printable character, else None."""
    if not isinstance(payload, str) or len(payload) != 1:
        return None
    if not payload.isprintable():
        return None
    return payload
