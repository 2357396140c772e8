from __future__ import annotations

"""Shared helpers for reading and validating configuration sections."""

from typing import Any, Collection, Mapping


def get_section(raw: Mapping[str, Any], key: str, *, required: bool) -> Mapping[str, Any]:
    """Return a mapping section, e.g. `log` from the root or `connector` from a server.

    Args:
        raw: Parent mapping.
        key: Full key path of the section; the last component is looked up.
        required: Whether the section must exist.

    Returns:
        Section mapping, or empty mapping for optional missing sections.

    Raises:
        ValueError: If section is required but missing.
        TypeError: If section is not a mapping.
    """
    section = raw.get(key.rsplit(".", 1)[-1])
    if section is None:
        if required:
            raise ValueError(f"Missing required config: {key}")
        return {}
    if not isinstance(section, Mapping):
        raise TypeError(f"{key} must be an object")
    return section


def get_required_value(section: Mapping[str, Any], field: str, config_key: str) -> Any:
    """Return a required field value, raising ValueError naming `config_key`."""
    if field not in section:
        raise ValueError(f"Missing required config: {config_key}")
    return section[field]


def get_optional_value(section: Mapping[str, Any], field: str, default: Any) -> Any:
    """Return optional field value; an explicit null also yields the default."""
    value = section.get(field)
    return default if value is None else value


def expect_str(value: Any, config_key: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{config_key} must be a string")
    return value


def expect_bool(value: Any, config_key: str) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"{config_key} must be a boolean")
    return value


def expect_int(value: Any, config_key: str) -> int:
    """Validate and return integer value (excluding bool)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{config_key} must be an integer")
    return value


def expect_float(value: Any, config_key: str) -> float:
    """Validate and return float value from numeric input."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{config_key} must be a number")
    return float(value)


def expect_version_str(value: Any, config_key: str) -> str:
    """Validate a version override; YAML turns `7.7` into a float, so numbers are accepted."""
    if isinstance(value, bool):
        raise TypeError(f"{config_key} must be a string")
    if isinstance(value, (int, float)):
        return str(value)
    return expect_str(value, config_key).strip()


def expect_choice(value: str, choices: Collection[str], config_key: str) -> str:
    """Validate that an (already normalized) string is one of `choices`."""
    if value not in choices:
        raise ValueError(f"{config_key} must be one of {sorted(choices)}")
    return value
