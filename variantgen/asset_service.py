"""
AssetService - Replaces asset resources and keeps their variants in sync.
"""

import logging
from typing import Callable, Dict, List, Optional

from .asset_repository import AssetRepository
from .exceptions import VariantGenerationError
from .models import Asset, Image, Resource
from .redirects import RedirectStorage
from .variant_generator import AssetVariantGenerator

ResourceReplacedListener = Callable[[Asset], None]


class AssetService:
    """
    Swaps the resource of an asset and regenerates all its variants.

    A variant that fails to regenerate is logged and left as it was; the
    replacement of the asset and of the other variants still goes ahead.
    """

    def __init__(
        self,
        repository: AssetRepository,
        generator: AssetVariantGenerator,
        storage,
        redirect_storage: Optional[RedirectStorage] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize asset service.

        Args:
            repository: Asset repository
            generator: Variant generator
            storage: Resource storage, used to resolve public paths
            redirect_storage: Optional redirect storage; without it no redirects are recorded
            logger: Optional logger instance
        """
        self.repository = repository
        self.generator = generator
        self.storage = storage
        self.redirect_storage = redirect_storage
        self.logger = logger or logging.getLogger(__name__)
        self._resource_replaced_listeners: List[ResourceReplacedListener] = []

    def connect_resource_replaced(self, listener: ResourceReplacedListener) -> None:
        """Call listener(asset) after every resource replacement."""
        self._resource_replaced_listeners.append(listener)

    def _emit_resource_replaced(self, asset: Asset) -> None:
        for listener in self._resource_replaced_listeners:
            listener(asset)

    def replace_asset_resource(
        self,
        asset: Asset,
        resource: Resource,
        keep_original_filename: bool = False,
        generate_redirects: bool = False
    ) -> Dict[str, str]:
        """
        Install resource as the asset's resource and regenerate its variants.

        Args:
            asset: Asset to update
            resource: New resource
            keep_original_filename: Keep the filename of the previous resource
            generate_redirects: Record 301 redirects from old to new public paths

        Returns:
            Mapping of old to new public paths (empty without redirects)
        """
        original_resource = asset.resource
        asset.resource = resource
        if keep_original_filename:
            resource.filename = original_resource.filename

        path_mapping: Dict[str, str] = {}
        redirects_enabled = generate_redirects and self.redirect_storage is not None
        if generate_redirects and self.redirect_storage is None:
            self.logger.warning("Redirects requested but no redirect storage is configured")
        if redirects_enabled:
            original_path = self.storage.public_path_for(original_resource)
            path_mapping[original_path] = self.storage.public_path_for(resource)

        if isinstance(asset, Image):
            for variant in asset.variants:
                original_variant_resource = variant.resource
                preset_identifier = variant.preset_identifier
                variant_name = variant.preset_variant_name
                try:
                    new_variant = self.generator.recreate_variant(asset, preset_identifier, variant_name)
                except VariantGenerationError as e:
                    self.logger.error(f"Error when recreating asset variant: {e}")
                    continue

                if new_variant is None:
                    self.logger.debug(
                        f"No variant returned when recreating asset variant "
                        f"{preset_identifier}::{variant_name} for {asset.title}"
                    )
                    continue

                if redirects_enabled and original_variant_resource is not None:
                    original_path = self.storage.public_path_for(original_variant_resource)
                    path_mapping[original_path] = self.storage.public_path_for(new_variant.resource)

        if redirects_enabled:
            self._add_redirects(path_mapping)

        self.repository.update(asset)
        self._emit_resource_replaced(asset)
        self.logger.info(f"Replaced asset resource: {asset.title}")
        return path_mapping

    def _add_redirects(self, path_mapping: Dict[str, str]) -> None:
        for original_path, new_path in path_mapping.items():
            if original_path == new_path:
                continue
            if self.redirect_storage.get_one_by_source_path(original_path) is not None:
                self.logger.debug(f"Redirect for {original_path} already exists")
                continue
            self.redirect_storage.add_redirect(original_path, new_path, 301)
