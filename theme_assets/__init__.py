from theme_assets.models import (
    AssetsOptions,
    ComputedName,
    FixedName,
    HostConfig,
    OutputAsset,
    OutputChunk,
    Target,
)
from theme_assets.plugins import BuildPlugin, ServePlugin, shopify_assets
from theme_assets.session import SyncSession

__all__ = [
    "AssetsOptions",
    "BuildPlugin",
    "ComputedName",
    "FixedName",
    "HostConfig",
    "OutputAsset",
    "OutputChunk",
    "ServePlugin",
    "SyncSession",
    "Target",
    "shopify_assets",
]
