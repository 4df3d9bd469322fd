import pytest

from tweakport.adapters.actions import START_LAYOUT_KEY, TASKBAND_KEY, WindowsActionRunner
from tweakport.catalog import build_default_catalog
from tweakport.core.errors import SettingApplyError

from conftest import FakeStore


def test_clean_taskbar_removes_pins():
    store = FakeStore({(TASKBAND_KEY, "Favorites"): b"\x00", (TASKBAND_KEY, "FavoritesResolve"): b"\x01"})
    definition = build_default_catalog().find("taskbar-clean")

    WindowsActionRunner(store).run("clean-taskbar", definition)

    assert store.values == {}


def test_clean_start_menu_10_drops_layout_cache():
    store = FakeStore(keys={START_LAYOUT_KEY})
    definition = build_default_catalog().find("start-menu-clean-10")

    WindowsActionRunner(store).run("clean-start-menu-10", definition)

    assert not store.key_exists(START_LAYOUT_KEY)


def test_unknown_action():
    definition = build_default_catalog().find("taskbar-clean")
    with pytest.raises(SettingApplyError, match="no-such-action"):
        WindowsActionRunner(FakeStore()).run("no-such-action", definition)
