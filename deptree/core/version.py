RANGE_OPERATORS = "^~"


def normalize(range_spec: str) -> str:
    """
    Turns a version range into the literal version used for a registry lookup.

    Only caret and tilde are understood; they are removed wherever they
    appear, anything else (>=, x-ranges, unions) passes through untouched.
    """
    return "".join(ch for ch in range_spec if ch not in RANGE_OPERATORS)
