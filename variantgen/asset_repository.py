"""
AssetRepository - Holds assets and their variants.

The in-memory repository keeps everything in a dict. JsonAssetRepository
adds a JSON document on disk that persist_all() writes and the constructor
loads.
"""

import json
import logging
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterator, Optional, Set, Tuple

from .adjustments import AdjustmentRegistry, default_registry
from .models import Asset, Document, Image, ImageVariant, Resource

VariantIdentity = Tuple[str, str]

ASSET_KINDS = {
    Image.kind: Image,
    Document.kind: Document,
}


def asset_from_dict(data: dict, registry: Optional[AdjustmentRegistry] = None) -> Asset:
    """Rebuild an asset and its variants from to_dict() output."""
    registry = registry or default_registry()
    asset_class = ASSET_KINDS.get(data.get('kind', Image.kind), Asset)
    asset = asset_class(
        identifier=data['identifier'],
        resource=Resource.from_dict(data['resource']),
        title=data.get('title', ''),
    )
    for variant_data in data.get('variants', []):
        variant = ImageVariant(asset)
        variant.preset_identifier = variant_data.get('preset_identifier')
        variant.preset_variant_name = variant_data.get('preset_variant_name')
        if variant_data.get('resource'):
            variant.resource = Resource.from_dict(variant_data['resource'])
        for descriptor in variant_data.get('adjustments', []):
            adjustment = registry.create(descriptor['type'])
            adjustment.configure(descriptor.get('options', {}))
            variant.add_adjustment(adjustment)
        asset.add_variant(variant)
    return asset


class AssetRepository:
    """
    In-memory asset repository.

    persist_all() is the checkpoint hook; here it only counts calls.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._assets: Dict[str, Asset] = {}
        self._dirty: Set[str] = set()
        self.persist_count = 0

    def add(self, asset: Asset) -> None:
        if asset.identifier in self._assets:
            raise ValueError(f"Asset {asset.identifier} already exists")
        self._assets[asset.identifier] = asset
        self._dirty.add(asset.identifier)

    def update(self, asset: Asset) -> None:
        if asset.identifier not in self._assets:
            raise KeyError(f"Unknown asset {asset.identifier}")
        self._assets[asset.identifier] = asset
        self._dirty.add(asset.identifier)

    def count_all(self) -> int:
        return len(self._assets)

    def find_by_identifier(self, identifier: str) -> Optional[Asset]:
        return self._assets.get(identifier)

    def find_all(self) -> Iterator[Asset]:
        for identifier in sorted(self._assets):
            yield self._assets[identifier]

    def find_asset_identifiers_with_variants(self) -> Dict[str, Set[VariantIdentity]]:
        """
        Map every asset identifier to the preset-based variant identities it has.

        One pass over all variants, then joined with the full identifier set
        so assets without variants map to an empty set.
        """
        variant_data = defaultdict(set)
        for asset in self._assets.values():
            if not isinstance(asset, Image):
                continue
            for variant in asset.variants:
                if variant.preset_identifier:
                    variant_data[asset.identifier].add(variant.identity)

        return {
            identifier: set(variant_data.get(identifier, ()))
            for identifier in self._assets
        }

    def persist_all(self) -> None:
        self.persist_count += 1
        self._dirty.clear()

    @property
    def has_pending_changes(self) -> bool:
        return bool(self._dirty)


class JsonAssetRepository(AssetRepository):
    """Asset repository backed by a JSON file."""

    def __init__(
        self,
        filepath: str,
        registry: Optional[AdjustmentRegistry] = None,
        logger: Optional[logging.Logger] = None
    ):
        super().__init__(logger)
        self.path = Path(filepath)
        self.registry = registry or default_registry()
        if self.path.exists():
            self._load()

    def _load(self) -> None:
        with open(self.path, 'r') as f:
            data = json.load(f)
        for asset_data in data.get('assets', []):
            asset = asset_from_dict(asset_data, self.registry)
            self._assets[asset.identifier] = asset
        self.logger.debug(f"Loaded {len(self._assets):,} assets from {self.path}")

    def to_dict(self) -> dict:
        return {'assets': [asset.to_dict() for asset in self.find_all()]}

    def persist_all(self) -> None:
        """Write all assets to disk, replacing the file atomically."""
        if not self.has_pending_changes and self.path.exists():
            self.persist_count += 1
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        with open(tmp_path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
        tmp_path.replace(self.path)
        self.logger.debug(f"Persisted {len(self._assets):,} assets to {self.path}")
        super().persist_all()
