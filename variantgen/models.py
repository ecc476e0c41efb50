"""
Assets, variants and the resources they point to.
"""

from dataclasses import dataclass, asdict
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .adjustments import ImageAdjustment


@dataclass
class Resource:
    """
    A stored binary.

    Attributes:
        sha1: SHA1 of the content, also the storage key
        filename: Display filename
        media_type: MIME type (e.g., 'image/jpeg')
        size: Size in bytes
    """
    sha1: str
    filename: str
    media_type: str
    size: int = 0

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'Resource':
        return cls(**data)


class Asset:
    """
    A source media item.

    Subclasses decide whether variants are supported; only Image does so far.
    """

    kind = 'asset'

    def __init__(self, identifier: str, resource: Resource, title: str = ''):
        self.identifier = identifier
        self.resource = resource
        self.title = title or resource.filename

    @property
    def media_type(self) -> str:
        return self.resource.media_type

    def to_dict(self) -> dict:
        return {
            'kind': self.kind,
            'identifier': self.identifier,
            'title': self.title,
            'resource': self.resource.to_dict(),
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.identifier!r})"


class Document(Asset):
    """A non-raster asset. Has no variants."""

    kind = 'document'


class Image(Asset):
    """A raster image asset carrying derived variants."""

    kind = 'image'

    def __init__(self, identifier: str, resource: Resource, title: str = ''):
        super().__init__(identifier, resource, title)
        self._variants: List['ImageVariant'] = []

    @property
    def variants(self) -> List['ImageVariant']:
        """Attached variants, as a copy safe to iterate while replacing."""
        return list(self._variants)

    def add_variant(self, variant: 'ImageVariant') -> None:
        if variant.original_asset is not self:
            raise ValueError(
                f"Variant belongs to {variant.original_asset!r}, not {self!r}"
            )
        self._variants.append(variant)

    def remove_variant(self, variant: 'ImageVariant') -> None:
        self._variants.remove(variant)

    def get_variant(
        self,
        preset_identifier: str,
        preset_variant_name: str
    ) -> Optional['ImageVariant']:
        """
        Find the variant with the given identity.

        Linear in the number of variants of this asset, which is small.
        """
        for variant in self._variants:
            if (variant.preset_identifier == preset_identifier
                    and variant.preset_variant_name == preset_variant_name):
                return variant
        return None

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['variants'] = [v.to_dict() for v in self._variants]
        return data


class ImageVariant:
    """
    A derived rendition of exactly one Image.

    The owning asset is fixed at construction. Together, preset_identifier and
    preset_variant_name form the variant identity.
    """

    def __init__(self, original_asset: Image):
        self._original_asset = original_asset
        self.preset_identifier: Optional[str] = None
        self.preset_variant_name: Optional[str] = None
        self.resource: Optional[Resource] = None
        self._adjustments: List['ImageAdjustment'] = []

    @property
    def original_asset(self) -> Image:
        return self._original_asset

    @property
    def identity(self) -> tuple:
        return self.preset_identifier, self.preset_variant_name

    @property
    def adjustments(self) -> List['ImageAdjustment']:
        return list(self._adjustments)

    def add_adjustment(self, adjustment: 'ImageAdjustment') -> None:
        self._adjustments.append(adjustment)

    def to_dict(self) -> dict:
        return {
            'preset_identifier': self.preset_identifier,
            'preset_variant_name': self.preset_variant_name,
            'resource': self.resource.to_dict() if self.resource else None,
            'adjustments': [a.to_descriptor() for a in self._adjustments],
        }

    def __repr__(self) -> str:
        return (
            f"ImageVariant({self._original_asset.identifier!r}, "
            f"{self.preset_identifier!r}, {self.preset_variant_name!r})"
        )
