import pytest

from tweakport.core.models import CUSTOM_STATE_INDEX, InputType, RegistrySetting, SelectionMetadata, SettingDefinition
from tweakport.core.selection import SelectionResolver, values_equal

KEY = r"HKEY_CURRENT_USER\Software\Test"

TWO_FIELDS = SettingDefinition(
    id="two-fields",
    name="Two fields",
    input_type=InputType.SELECTION,
    registry_settings=(RegistrySetting(KEY, "A"), RegistrySetting(KEY, "B")),
    selection=SelectionMetadata(
        display_names=("Off", "On", "Any B"),
        value_mappings=({"A": 0, "B": 0}, {"A": 1, "B": 1}, {"B": 1}),
    ),
)


def test_values_equal_coercions():
    assert values_equal(1, "1")
    assert values_equal(b"\x01\x02", "0102")
    assert values_equal("Allow", "allow")
    assert values_equal(True, 1)
    assert not values_equal(None, 0)
    assert values_equal(None, None)
    assert not values_equal("2", 3)


def test_first_matching_option_wins():
    resolver = SelectionResolver()
    assert resolver.resolve_index(TWO_FIELDS, {"A": 1, "B": 1}) == 1
    assert resolver.resolve_index(TWO_FIELDS, {"A": 5, "B": 1}) == 2


def test_no_match_is_custom_state():
    resolver = SelectionResolver()
    assert resolver.resolve_index(TWO_FIELDS, {"A": 7, "B": 7}) == CUSTOM_STATE_INDEX
    assert resolver.resolve_index(TWO_FIELDS, {}) == CUSTOM_STATE_INDEX


def test_index_to_raw_values():
    resolver = SelectionResolver()
    assert dict(resolver.index_to_raw_values(TWO_FIELDS, 0)) == {"A": 0, "B": 0}
    assert resolver.index_to_raw_values(TWO_FIELDS, CUSTOM_STATE_INDEX) is None
    with pytest.raises(ValueError):
        resolver.index_to_raw_values(TWO_FIELDS, 3)


def test_display_name():
    resolver = SelectionResolver()
    assert resolver.display_name(TWO_FIELDS, 1) == "On"
    assert resolver.display_name(TWO_FIELDS, CUSTOM_STATE_INDEX) == "Custom"


def test_mappings_are_read_only():
    with pytest.raises(TypeError):
        TWO_FIELDS.selection.value_mappings[0]["A"] = 5
