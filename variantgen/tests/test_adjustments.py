"""Tests for image adjustments and the adjustment registry."""

import pytest
from PIL import Image

from variantgen.adjustments import (
    AdjustmentRegistry,
    CropImageAdjustment,
    ImageAdjustment,
    QualityImageAdjustment,
    ResizeImageAdjustment,
    default_registry,
)
from variantgen.exceptions import (
    InvalidAdjustmentOptions,
    InvalidAdjustmentType,
    UnknownAdjustmentType,
)


def configured(adjustment_class, **options):
    adjustment = adjustment_class()
    adjustment.configure(options)
    return adjustment


class TestAdjustmentRegistry:
    """Tests for AdjustmentRegistry class."""

    def test_default_registry_types(self):
        """Test the built-in adjustments are registered."""
        assert default_registry().types == ['crop', 'quality', 'resize']

    def test_create(self):
        """Test creating a registered adjustment."""
        adjustment = default_registry().create('resize')

        assert isinstance(adjustment, ResizeImageAdjustment)

    def test_create_returns_fresh_instances(self):
        """Test every create() call builds a new adjustment."""
        registry = default_registry()

        assert registry.create('crop') is not registry.create('crop')

    def test_unknown_type(self):
        """Test unregistered tags fail closed."""
        with pytest.raises(UnknownAdjustmentType) as exc_info:
            AdjustmentRegistry().create('resize')

        assert exc_info.value.adjustment_type == 'resize'

    def test_invalid_type(self):
        """Test factories must produce ImageAdjustment instances."""
        registry = AdjustmentRegistry()
        registry.register('dict', dict)

        with pytest.raises(InvalidAdjustmentType):
            registry.create('dict')

    def test_custom_adjustment(self):
        """Test third-party adjustments can be registered."""
        class Grayscale(ImageAdjustment):
            type_name = 'grayscale'

            def configure(self, options):
                self.options = None

            def apply(self, image):
                return image.convert('L')

        registry = default_registry()
        registry.register('grayscale', Grayscale)

        assert 'grayscale' in registry
        adjustment = registry.create('grayscale')
        assert adjustment.apply(Image.new('RGB', (4, 4))).mode == 'L'
        assert adjustment.to_descriptor() == {'type': 'grayscale', 'options': {}}


class TestResizeImageAdjustment:
    """Tests for ResizeImageAdjustment class."""

    @pytest.fixture
    def image(self):
        return Image.new('RGB', (200, 100), color='blue')

    def test_inset_keeps_aspect_ratio(self, image):
        """Test inset scaling fits the image into the box."""
        result = configured(ResizeImageAdjustment, width=50, height=50).apply(image)

        assert result.size == (50, 25)

    def test_width_only(self, image):
        """Test a single dimension scales proportionally."""
        result = configured(ResizeImageAdjustment, width=100).apply(image)

        assert result.size == (100, 50)

    def test_outbound_fills_box(self, image):
        """Test outbound mode fills and crops to the exact box."""
        result = configured(ResizeImageAdjustment, width=50, height=50, ratio_mode='outbound').apply(image)

        assert result.size == (50, 50)

    def test_maximum_dimensions(self, image):
        """Test maximum width caps the result."""
        result = configured(ResizeImageAdjustment, maximumWidth=80).apply(image)

        assert result.size == (80, 40)

    def test_no_upscaling_by_default(self, image):
        """Test images are not enlarged unless allowed."""
        adjustment = configured(ResizeImageAdjustment, width=400)

        assert adjustment.apply(image) is image

    def test_upscaling_allowed(self, image):
        """Test allow_upscaling enlarges the image."""
        result = configured(ResizeImageAdjustment, width=400, allowUpscaling=True).apply(image)

        assert result.size == (400, 200)

    def test_camel_case_options(self):
        """Test camelCase option names are accepted."""
        adjustment = configured(ResizeImageAdjustment, maximumHeight=10, ratioMode='outbound')

        assert adjustment.options.maximum_height == 10
        assert adjustment.options.ratio_mode == 'outbound'

    @pytest.mark.parametrize('options', [
        {'width': 0},
        {'width': 'wide'},
        {'width': True},
        {'ratio_mode': 'stretch'},
        {'allow_upscaling': 'maybe'},
        {'depth': 3},
    ])
    def test_invalid_options(self, options):
        """Test invalid options are rejected."""
        with pytest.raises(InvalidAdjustmentOptions):
            configured(ResizeImageAdjustment, **options)

    def test_descriptor(self):
        """Test descriptors round-trip through the registry."""
        adjustment = configured(ResizeImageAdjustment, width=10)
        descriptor = adjustment.to_descriptor()

        rebuilt = default_registry().create(descriptor['type'])
        rebuilt.configure(descriptor['options'])

        assert rebuilt.options == adjustment.options


class TestCropImageAdjustment:
    """Tests for CropImageAdjustment class."""

    @pytest.fixture
    def image(self):
        return Image.new('RGB', (160, 90), color='green')

    def test_box_crop(self, image):
        """Test a fixed box is cut out."""
        result = configured(CropImageAdjustment, x=10, y=10, width=50, height=30).apply(image)

        assert result.size == (50, 30)

    def test_box_is_clamped(self, image):
        """Test boxes beyond the image are clamped."""
        result = configured(CropImageAdjustment, x=150, y=0, width=50, height=200).apply(image)

        assert result.size == (10, 90)

    def test_aspect_ratio(self, image):
        """Test the largest centred box with the aspect ratio is used."""
        result = configured(CropImageAdjustment, aspect_ratio='1:1').apply(image)

        assert result.size == (90, 90)

    def test_aspect_ratio_matching_image(self, image):
        """Test no crop happens when the ratio already matches."""
        adjustment = configured(CropImageAdjustment, aspect_ratio='16:9')

        assert adjustment.apply(image) is image

    @pytest.mark.parametrize('options', [
        {},
        {'width': 10},
        {'aspect_ratio': 'square'},
        {'aspect_ratio': '0:1'},
        {'x': -1, 'width': 10, 'height': 10},
    ])
    def test_invalid_options(self, options):
        """Test invalid crop options are rejected."""
        with pytest.raises(InvalidAdjustmentOptions):
            configured(CropImageAdjustment, **options)


class TestQualityImageAdjustment:
    """Tests for QualityImageAdjustment class."""

    def test_save_options(self):
        """Test the quality ends up in the encoder options."""
        adjustment = configured(QualityImageAdjustment, quality=60)

        assert adjustment.save_options() == {'quality': 60}

    def test_pixels_untouched(self):
        """Test the image itself is not changed."""
        image = Image.new('RGB', (10, 10))

        assert configured(QualityImageAdjustment, quality=60).apply(image) is image

    def test_out_of_range(self):
        """Test qualities above 100 are rejected."""
        with pytest.raises(InvalidAdjustmentOptions):
            configured(QualityImageAdjustment, quality=101)
