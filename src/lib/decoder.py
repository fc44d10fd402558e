"""
Structured-data decoding for the yaml-table directive

Any callable taking text and returning plain Python data can stand in for
yaml_decode(), provided it raises DecodeError on malformed input.
"""

from typing import Any

import yaml


class DecodeError(Exception):
    """Raised when structured data cannot be decoded"""
    pass


def yaml_decode(text: str) -> Any:
    """
    Decode YAML text into lists, dicts and scalars.

    Mappings keep their key order as written in the file.

    Raises:
        DecodeError: If the text is not valid YAML, or holds a tagged or
                     date-shaped scalar that cannot be constructed
    """
    try:
        return yaml.safe_load(text)
    except (yaml.YAMLError, ValueError, TypeError) as e:
        raise DecodeError(f"Failed to parse YAML: {e}") from e
