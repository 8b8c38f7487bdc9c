"""ZXplorer: an interactive editor for ZX-diagrams."""

__version__ = "0.3.0"
__app_id__ = "io.github.zxplorer.ZXplorer"
