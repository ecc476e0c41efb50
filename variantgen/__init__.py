"""
Asset Variant Batch Rendering

Renders preset-based variants of image assets and keeps them in sync:
    1. Render: walk all assets and generate the variants their presets call for
    2. Replace: swap an asset's resource, regenerate its variants and record redirects

Supports both S3 and local filesystem resource storage.
"""

__version__ = "1.0.0"

from .exceptions import (
    VariantgenError,
    PresetConfigurationError,
    VariantGenerationError,
    UnknownAdjustmentType,
    InvalidAdjustmentType,
    InvalidAdjustmentOptions,
    AdjustmentApplicationFailed,
    VariantAssetIdentityMismatch,
)
from .models import Resource, Asset, Image, Document, ImageVariant
from .adjustments import (
    ImageAdjustment,
    ResizeImageAdjustment,
    CropImageAdjustment,
    QualityImageAdjustment,
    AdjustmentRegistry,
    default_registry,
)
from .presets import AdjustmentConfiguration, VariantConfiguration, VariantPreset, PresetCatalog
from .s3_config import S3Config
from .s3_client import S3ResourceStorage
from .resource_storage import LocalConfig, LocalResourceStorage
from .asset_repository import AssetRepository, JsonAssetRepository
from .existence_index import build_existence_index
from .redirects import Redirect, RedirectStorage, JsonRedirectStorage
from .variant_renderer import VariantRenderer
from .variant_generator import AssetVariantGenerator
from .render_stats import RenderStats
from .render_progress import RenderProgress
from .batch_renderer import BatchRenderer
from .asset_service import AssetService
from .settings import Settings
from .reporter import Reporter

__all__ = [
    "VariantgenError",
    "PresetConfigurationError",
    "VariantGenerationError",
    "UnknownAdjustmentType",
    "InvalidAdjustmentType",
    "InvalidAdjustmentOptions",
    "AdjustmentApplicationFailed",
    "VariantAssetIdentityMismatch",
    "Resource",
    "Asset",
    "Image",
    "Document",
    "ImageVariant",
    "ImageAdjustment",
    "ResizeImageAdjustment",
    "CropImageAdjustment",
    "QualityImageAdjustment",
    "AdjustmentRegistry",
    "default_registry",
    "AdjustmentConfiguration",
    "VariantConfiguration",
    "VariantPreset",
    "PresetCatalog",
    "S3Config",
    "S3ResourceStorage",
    "LocalConfig",
    "LocalResourceStorage",
    "AssetRepository",
    "JsonAssetRepository",
    "build_existence_index",
    "Redirect",
    "RedirectStorage",
    "JsonRedirectStorage",
    "VariantRenderer",
    "AssetVariantGenerator",
    "RenderStats",
    "RenderProgress",
    "BatchRenderer",
    "AssetService",
    "Settings",
    "Reporter",
]
