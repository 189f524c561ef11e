"""Path parameter parsing and type conversion.

Built-in converters for route path segments like ``{id:int}``.
"""

import re

# (regex_pattern, python_type) for each supported converter
CONVERTERS: dict[str, tuple[str, type]] = {
    "str": (r"[^/]+", str),
    "int": (r"\d+", int),
    "float": (r"\d+(?:\.\d+)?", float),
    "path": (r".+", str),
}


def convert_param(value: str, param_type: str) -> str | int | float:
    """Convert a captured path parameter string to the target type.

    Raises ``ValueError`` if the string cannot be converted.
    Raises ``KeyError`` if *param_type* is not a registered converter.
    """
    _, target_type = CONVERTERS[param_type]
    return target_type(value)


def format_param(value: object, param_type: str) -> str | None:
    """Render *value* for a ``param_type`` segment, or ``None`` if it does not fit."""
    pattern, _ = CONVERTERS[param_type]
    text = str(value)
    if re.fullmatch(pattern, text) is None:
        return None
    return text
