"""
AssetVariantGenerator - Creates and recreates preset-based image variants.
"""

import logging
from typing import List, Mapping, Optional

from .adjustments import AdjustmentRegistry, ImageAdjustment, default_registry
from .exceptions import (
    AdjustmentApplicationFailed,
    VariantAssetIdentityMismatch,
    VariantGenerationError,
)
from .models import Asset, Image, ImageVariant
from .presets import PresetCatalog, VariantConfiguration, VariantPreset
from .variant_renderer import VariantRenderer


class AssetVariantGenerator:
    """
    Generates a single variant of an asset from the preset catalog.

    create_one_variant() attaches the new variant unconditionally; callers
    that must not produce duplicates check for existing variants first.
    recreate_variant() replaces any variant with the same identity.
    """

    def __init__(
        self,
        catalog: PresetCatalog,
        renderer: VariantRenderer,
        registry: Optional[AdjustmentRegistry] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize generator.

        Args:
            catalog: Preset catalog
            renderer: Renders a variant's adjustment chain into a resource
            registry: Adjustment registry (default: built-in adjustments)
            logger: Optional logger instance
        """
        self.catalog = catalog
        self.renderer = renderer
        self.registry = registry or default_registry()
        self.logger = logger or logging.getLogger(__name__)

    def get_variant_presets(self) -> Mapping[str, VariantPreset]:
        return self.catalog.presets()

    def create_one_variant(
        self,
        asset: Asset,
        preset_identifier: str,
        variant_identifier: str
    ) -> Optional[ImageVariant]:
        """
        Create a variant and attach it to asset.

        Returns:
            The created variant, or None if the asset kind, preset or
            variant does not apply.
        """
        variant_configuration = self._resolve(asset, preset_identifier, variant_identifier)
        if variant_configuration is None:
            return None

        created_variant = self.render_variant(asset, preset_identifier, variant_configuration)
        asset.add_variant(created_variant)
        return created_variant

    def recreate_variant(
        self,
        asset: Asset,
        preset_identifier: str,
        variant_identifier: str
    ) -> Optional[ImageVariant]:
        """
        Create a variant and replace an existing one with the same identity.

        Returns:
            The created variant, or None if the asset kind, preset or
            variant does not apply.
        """
        variant_configuration = self._resolve(asset, preset_identifier, variant_identifier)
        if variant_configuration is None:
            return None

        created_variant = self.render_variant(asset, preset_identifier, variant_configuration)
        self.replace_variant(created_variant, asset)
        return created_variant

    def _resolve(
        self,
        asset: Asset,
        preset_identifier: str,
        variant_identifier: str
    ) -> Optional[VariantConfiguration]:
        # Only images carry variants so far.
        if not isinstance(asset, Image):
            self.logger.debug(f"Skipping {asset!r}: {asset.kind} assets have no variants")
            return None

        preset = self.catalog.get(preset_identifier)
        if preset is None or not preset.matches_media_type(asset.media_type):
            return None

        return preset.variants().get(variant_identifier)

    def build_adjustments(self, variant_configuration: VariantConfiguration) -> List[ImageAdjustment]:
        """Instantiate and configure the adjustment chain, in declared order."""
        adjustments = []
        for adjustment_configuration in variant_configuration.adjustments:
            adjustment = self.registry.create(adjustment_configuration.type)
            adjustment.configure(adjustment_configuration.options)
            adjustments.append(adjustment)
        return adjustments

    def render_variant(
        self,
        original_asset: Image,
        preset_identifier: str,
        variant_configuration: VariantConfiguration
    ) -> ImageVariant:
        """Build a detached variant of original_asset with its resource rendered."""
        adjustments = self.build_adjustments(variant_configuration)

        variant = ImageVariant(original_asset)
        variant.preset_identifier = preset_identifier
        variant.preset_variant_name = variant_configuration.identifier

        try:
            for adjustment in adjustments:
                variant.add_adjustment(adjustment)
            self.renderer.render(variant)
        except VariantGenerationError:
            raise
        except Exception as e:
            raise AdjustmentApplicationFailed(
                f"Error when adding adjustments to asset {original_asset.identifier}: {e}"
            ) from e

        return variant

    def replace_variant(self, variant: ImageVariant, asset: Image) -> None:
        """
        Attach variant, detaching an existing one with the same identity first.
        """
        if variant.original_asset is not asset:
            raise VariantAssetIdentityMismatch(
                f"Could not add {variant!r} to {asset!r}: the variant refers to a "
                f"different original asset."
            )

        existing_variant = asset.get_variant(variant.preset_identifier, variant.preset_variant_name)
        if existing_variant is not None:
            asset.remove_variant(existing_variant)
        asset.add_variant(variant)
