"""Resolution between raw store values and Selection option indices."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from .models import CUSTOM_STATE_INDEX, SettingDefinition

logger = logging.getLogger(__name__)


def values_equal(actual: Any, expected: Any) -> bool:
    """Compare a stored value with an expected one.

    Integers and their decimal string forms compare equal; bytes compare
    equal to their hex form. Strings compare case-insensitively.
    """
    if actual is None or expected is None:
        return actual is None and expected is None
    if actual == expected and type(actual) is type(expected):
        return True

    if isinstance(actual, bool) or isinstance(expected, bool):
        return bool(actual) == bool(expected) and _is_boolish(actual) and _is_boolish(expected)

    if isinstance(actual, (bytes, bytearray)) or isinstance(expected, (bytes, bytearray)):
        return _as_hex(actual) == _as_hex(expected)

    try:
        return int(actual) == int(expected)
    except (TypeError, ValueError):
        pass

    if isinstance(actual, str) and isinstance(expected, str):
        return actual.casefold() == expected.casefold()
    return actual == expected


def _is_boolish(value: Any) -> bool:
    return isinstance(value, bool) or value in (0, 1)


def _as_hex(value: Any) -> str | None:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    if isinstance(value, str):
        return value.replace(" ", "").replace("-", "").lower()
    return None


class SelectionResolver:
    """Maps raw values to an option index and back."""

    def resolve_index(self, definition: SettingDefinition, raw_values: Mapping[str, Any]) -> int:
        """Return the first option whose mapping matches every raw value.

        Options are tried in definition order. When none matches the
        custom-state sentinel is returned; the caller keeps ``raw_values`` so
        the exact combination can be written back later.
        """
        metadata = definition.selection
        if metadata is None:
            return CUSTOM_STATE_INDEX

        for index, mapping in enumerate(metadata.value_mappings):
            if not mapping:
                continue
            if all(values_equal(raw_values.get(name), expected) for name, expected in mapping.items()):
                return index

        logger.debug("%s: raw values %s match no option", definition.id, dict(raw_values))
        return CUSTOM_STATE_INDEX

    def index_to_raw_values(self, definition: SettingDefinition, index: int) -> Mapping[str, Any] | None:
        """Raw values for an option index; None for the custom-state sentinel.

        Raises:
            ValueError: The definition has no options or the index is out of range.
        """
        if index == CUSTOM_STATE_INDEX:
            return None

        metadata = definition.selection
        if metadata is None:
            raise ValueError(f"{definition.id} has no selection options")
        if not 0 <= index < len(metadata.value_mappings):
            raise ValueError(
                f"{definition.id}: option index {index} out of range "
                f"(0..{len(metadata.value_mappings) - 1})"
            )
        return metadata.value_mappings[index]

    def display_name(self, definition: SettingDefinition, index: int) -> str:
        metadata = definition.selection
        if index == CUSTOM_STATE_INDEX or metadata is None:
            return "Custom"
        if 0 <= index < len(metadata.display_names):
            return metadata.display_names[index]
        return str(index)
