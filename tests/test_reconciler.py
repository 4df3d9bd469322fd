from tweakport.catalog import build_default_catalog
from tweakport.core.models import HostInfo, InputType
from tweakport.core.reconciler import CompatibilityReconciler, summarize_sections
from tweakport.core.schema import ConfigSection, ConfigurationItem, FeatureGroupSection, UnifiedConfigurationFile

WIN10 = HostInfo(is_windows11=False, build_number=19045)


def _config():
    return UnifiedConfigurationFile(
        optimize=FeatureGroupSection(
            is_included=True,
            features={
                "privacy": ConfigSection(
                    is_included=True,
                    items=[
                        ConfigurationItem(id="privacy-advertising-id", name="Advertising ID", is_selected=False),
                        ConfigurationItem(id="privacy-recall-snapshots", name="Recall snapshots", is_selected=False),
                        ConfigurationItem(id="privacy-from-the-future", name="Future", is_selected=True),
                    ],
                )
            },
        ),
        customize=FeatureGroupSection(
            is_included=True,
            features={
                "taskbar": ConfigSection(
                    is_included=True,
                    items=[
                        ConfigurationItem(
                            id="taskbar-alignment",
                            name="Taskbar alignment",
                            input_type=InputType.SELECTION,
                            selected_index=0,
                        ),
                        ConfigurationItem(id="taskbar-task-view", name="Task view button", is_selected=True),
                    ],
                )
            },
        ),
        windows_apps=ConfigSection(is_included=True, items=[ConfigurationItem(id="app", appx_package_name="Pkg")]),
    )


def test_detect_incompatible_lists_known_incompatible_items_only():
    reconciler = CompatibilityReconciler(build_default_catalog())
    assert reconciler.detect_incompatible(_config(), WIN10) == [
        "Recall snapshots (privacy)",
        "Taskbar alignment (taskbar)",
    ]


def test_filter_keeps_unknown_ids_and_copies():
    config = _config()
    reconciler = CompatibilityReconciler(build_default_catalog())

    filtered = reconciler.filter(config, WIN10)

    privacy_ids = [i.id for i in filtered.optimize.features["privacy"].items]
    assert privacy_ids == ["privacy-advertising-id", "privacy-from-the-future"]
    assert [i.id for i in filtered.customize.features["taskbar"].items] == ["taskbar-task-view"]
    assert filtered.windows_apps.items[0].appx_package_name == "Pkg"
    # Input untouched
    assert len(config.optimize.features["privacy"].items) == 3
    assert filtered.windows_apps.items[0] is not config.windows_apps.items[0]


def test_filter_idempotent():
    reconciler = CompatibilityReconciler(build_default_catalog())
    once = reconciler.filter(_config(), WIN10)
    twice = reconciler.filter(once, WIN10)
    assert once.model_dump() == twice.model_dump()
    assert reconciler.detect_incompatible(once, WIN10) == []


def test_summarize_sections():
    counts = summarize_sections(_config())
    assert counts == {
        "Optimize": 3,
        "Optimize_privacy": 3,
        "Customize": 2,
        "Customize_taskbar": 2,
        "WindowsApps": 1,
    }
