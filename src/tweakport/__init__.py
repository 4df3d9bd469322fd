"""tweakport - Export, reconcile and re-apply Windows tweak configurations"""

__version__ = "1.0.0"
__description__ = "Export, reconcile and re-apply Windows tweak configurations"

__all__ = ["main", "build_default_catalog", "__version__"]


def __getattr__(name: str):
    """Lazy import so that tweakport.config or tweakport.core can be imported
    without pulling the Windows-only adapters (pywin32) in.
    """
    if name == "main":
        from .main import main

        return main
    if name == "build_default_catalog":
        from .catalog import build_default_catalog

        return build_default_catalog
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
