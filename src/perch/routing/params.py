"""Path parameter converters.

Built-in converters for route segments like ``{id:int}``. A converter
only decides whether a segment matches; captured values stay strings so
they can be compared positionally between navigations.
"""

import re

# regex_pattern for each supported converter
CONVERTERS: dict[str, str] = {
    "str": r"[^/]+",
    "int": r"\d+",
    "float": r"\d+(?:\.\d+)?",
    "path": r".+",
}


def converter_regex(param_type: str) -> re.Pattern[str]:
    """Compile the full-segment regex for *param_type*.

    Raises ``KeyError`` if *param_type* is not a registered converter.
    """
    return re.compile(f"^{CONVERTERS[param_type]}$")
