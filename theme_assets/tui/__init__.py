from theme_assets.tui.renderers import AssetConsoleUI

__all__ = ["AssetConsoleUI"]
