from typing import Final


LOG_PREFIX: Final[str] = "[shopify-assets]"

THEME_ASSETS_DIRNAME: Final[str] = "assets"
PUBLIC_DIRNAME: Final[str] = "public"

HOST_INTERNAL_DIRNAME: Final[str] = ".vite"
MANIFEST_RELATIVE_PATH: Final[str] = ".vite/manifest.json"

# Patterns that would match virtually any file in a destination.
GENERIC_CLEAN_PATTERNS: Final[frozenset[str]] = frozenset(
    {"*", "**", "**/*", "*.*", "**/*.*"}
)

CONFIG_FILENAMES: Final[tuple[str, ...]] = (
    "theme-assets.yaml",
    "theme-assets.yml",
    "theme-assets.json",
)

RENAME_PLACEHOLDERS: Final[tuple[str, ...]] = ("{name}", "{ext}", "{src}")
