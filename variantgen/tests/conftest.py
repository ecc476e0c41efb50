"""
Pytest fixtures for variantgen tests.
"""

import io
import itertools

import pytest


THUMBNAIL_PRESETS = {
    'presets': {
        'thumbnails': {
            'label': 'Thumbnails',
            'mediaTypePatterns': ['^image/(jpeg|png|gif)$'],
            'variants': {
                'small': {
                    'adjustments': [
                        {'type': 'resize', 'options': {'width': 40, 'height': 40}},
                    ]
                },
                'large': {
                    'adjustments': [
                        {'type': 'resize', 'options': {'maximumWidth': 80}},
                        {'type': 'quality', 'options': {'quality': 70}},
                    ]
                },
            },
        },
        'squares': {
            'mediaTypePatterns': ['^image/'],
            'variants': {
                'square': {
                    'adjustments': [
                        {'type': 'crop', 'options': {'aspectRatio': '1:1'}},
                    ]
                },
            },
        },
    }
}


@pytest.fixture
def catalog_data():
    """Fixture providing a raw preset document."""
    import copy
    return copy.deepcopy(THUMBNAIL_PRESETS)


@pytest.fixture
def catalog(catalog_data):
    """Fixture providing a preset catalog with 'thumbnails' and 'squares'."""
    from variantgen.presets import PresetCatalog
    return PresetCatalog.from_dict(catalog_data)


@pytest.fixture
def thumbnails_catalog(catalog_data):
    """Fixture providing a catalog with only the 'thumbnails' preset."""
    from variantgen.presets import PresetCatalog
    del catalog_data['presets']['squares']
    return PresetCatalog.from_dict(catalog_data)


@pytest.fixture
def sample_image_bytes():
    """Fixture providing sample JPEG image bytes (120x80)."""
    from PIL import Image

    img = Image.new('RGB', (120, 80), color='red')
    buffer = io.BytesIO()
    img.save(buffer, format='JPEG')
    return buffer.getvalue()


@pytest.fixture
def sample_png_bytes():
    """Fixture providing sample PNG image bytes with transparency."""
    from PIL import Image

    img = Image.new('RGBA', (100, 100), color=(255, 0, 0, 128))
    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()


@pytest.fixture
def storage(tmp_path):
    """Fixture providing local resource storage in a temporary directory."""
    from variantgen.resource_storage import LocalConfig, LocalResourceStorage
    return LocalResourceStorage(LocalConfig(root_path=str(tmp_path / 'resources')))


@pytest.fixture
def renderer(storage):
    """Fixture providing a Pillow renderer on local storage."""
    from variantgen.variant_renderer import VariantRenderer
    return VariantRenderer(storage)


@pytest.fixture
def stub_renderer():
    """Fixture providing a renderer that gives every variant a fresh resource."""
    from unittest.mock import MagicMock
    from variantgen.models import Resource

    counter = itertools.count(1)

    def render(variant):
        n = next(counter)
        variant.resource = Resource(
            sha1=f'{n:040x}',
            filename=f'{variant.preset_variant_name}.jpg',
            media_type='image/jpeg',
            size=n,
        )

    mock = MagicMock()
    mock.render.side_effect = render
    return mock


@pytest.fixture
def generator(catalog, stub_renderer, logger):
    """Fixture providing a generator with a stub renderer."""
    from variantgen.variant_generator import AssetVariantGenerator
    return AssetVariantGenerator(catalog, stub_renderer, logger=logger)


@pytest.fixture
def make_image():
    """Fixture providing a factory for Image assets."""
    from variantgen.models import Image, Resource

    def factory(identifier='asset-a', media_type='image/jpeg', filename='photo.jpg', sha1=None):
        resource = Resource(
            sha1=sha1 or f'{abs(hash(identifier)):040x}'[:40],
            filename=filename,
            media_type=media_type,
            size=1000,
        )
        return Image(identifier, resource)

    return factory


@pytest.fixture
def stored_image(storage, sample_image_bytes):
    """Fixture providing an Image whose resource exists in local storage."""
    from variantgen.models import Image

    resource = storage.import_resource(sample_image_bytes, 'photo.jpg', 'image/jpeg')
    return Image('asset-a', resource, title='Photo')


@pytest.fixture
def repository():
    """Fixture providing an empty in-memory repository."""
    from variantgen.asset_repository import AssetRepository
    return AssetRepository()


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    import logging
    return logging.getLogger('test')
