"""
Image adjustments - single configurable steps of a variant's render chain.

Adjustments are looked up by type tag in an AdjustmentRegistry. Each kind
decodes its generic option mapping into a typed options dataclass before it
is applied.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict, fields
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from PIL import Image, ImageOps

from .exceptions import (
    InvalidAdjustmentOptions,
    InvalidAdjustmentType,
    UnknownAdjustmentType,
)

_CAMEL_BOUNDARY = re.compile(r'(?<!^)(?=[A-Z])')


def _normalize_key(key: str) -> str:
    """Accept both 'maximumWidth' and 'maximum_width'."""
    return _CAMEL_BOUNDARY.sub('_', key).lower()


def _positive_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidAdjustmentOptions(f"Option '{name}' must be an integer, got {value!r}")
    try:
        result = int(value)
    except (TypeError, ValueError):
        raise InvalidAdjustmentOptions(f"Option '{name}' must be an integer, got {value!r}") from None
    if result <= 0:
        raise InvalidAdjustmentOptions(f"Option '{name}' must be positive, got {result}")
    return result


def _non_negative_int(name: str, value: Any) -> int:
    if value == 0:
        return 0
    return _positive_int(name, value)


def _boolean(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ('true', 'false', '1', '0'):
        return value.lower() in ('true', '1')
    raise InvalidAdjustmentOptions(f"Option '{name}' must be a boolean, got {value!r}")


def _decode_options(
    options_class: type,
    options: Mapping[str, Any],
    converters: Dict[str, Callable[[str, Any], Any]]
) -> dict:
    """Map a raw option mapping onto the fields of options_class."""
    known = {f.name for f in fields(options_class)}
    values = {}
    for raw_key, value in (options or {}).items():
        key = _normalize_key(raw_key)
        if key not in known:
            raise InvalidAdjustmentOptions(
                f"Unknown option '{raw_key}' for {options_class.__name__}"
            )
        if value is None:
            continue
        convert = converters.get(key)
        values[key] = convert(key, value) if convert else value
    return values


class ImageAdjustment(ABC):
    """
    A single transformation step applied to a Pillow image.

    Subclasses set type_name and implement configure() and apply().
    """

    type_name: str = ''

    def __init__(self):
        self.options = None

    @abstractmethod
    def configure(self, options: Mapping[str, Any]) -> None:
        """Decode and validate the generic option mapping."""

    @abstractmethod
    def apply(self, image: Image.Image) -> Image.Image:
        """Return the adjusted image."""

    def save_options(self) -> dict:
        """Encoder options contributed by this adjustment."""
        return {}

    def to_descriptor(self) -> dict:
        options = {k: v for k, v in asdict(self.options).items() if v is not None} if self.options else {}
        return {'type': self.type_name, 'options': options}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.options!r})"


@dataclass
class ResizeOptions:
    width: Optional[int] = None
    height: Optional[int] = None
    maximum_width: Optional[int] = None
    maximum_height: Optional[int] = None
    ratio_mode: str = 'inset'
    allow_upscaling: bool = False

    RATIO_MODES = ('inset', 'outbound')

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> 'ResizeOptions':
        values = _decode_options(cls, options, {
            'width': _positive_int,
            'height': _positive_int,
            'maximum_width': _positive_int,
            'maximum_height': _positive_int,
            'allow_upscaling': _boolean,
        })
        ratio_mode = values.get('ratio_mode', 'inset')
        if ratio_mode not in cls.RATIO_MODES:
            raise InvalidAdjustmentOptions(
                f"Option 'ratio_mode' must be one of {', '.join(cls.RATIO_MODES)}, got {ratio_mode!r}"
            )
        return cls(**values)


class ResizeImageAdjustment(ImageAdjustment):
    """
    Scale an image.

    With ratio_mode 'inset' the image is scaled to fit inside the given box.
    With 'outbound' and both width and height set, the box is filled and the
    overflow is cropped from the centre. maximum_width/maximum_height cap the
    result in either mode.
    """

    type_name = 'resize'

    def configure(self, options: Mapping[str, Any]) -> None:
        self.options = ResizeOptions.from_options(options)

    def apply(self, image: Image.Image) -> Image.Image:
        o = self.options
        width, height = image.size

        if o.ratio_mode == 'outbound' and o.width and o.height:
            target_w, target_h = o.width, o.height
            if o.maximum_width:
                target_w = min(target_w, o.maximum_width)
            if o.maximum_height:
                target_h = min(target_h, o.maximum_height)
            if not o.allow_upscaling:
                target_w, target_h = min(target_w, width), min(target_h, height)
            if (target_w, target_h) == (width, height):
                return image
            return ImageOps.fit(image, (target_w, target_h), Image.Resampling.LANCZOS)

        candidates = []
        if o.width:
            candidates.append(o.width / width)
        if o.height:
            candidates.append(o.height / height)
        scale = min(candidates) if candidates else 1.0
        if o.maximum_width:
            scale = min(scale, o.maximum_width / width)
        if o.maximum_height:
            scale = min(scale, o.maximum_height / height)
        if not o.allow_upscaling:
            scale = min(scale, 1.0)

        new_size = (max(1, round(width * scale)), max(1, round(height * scale)))
        if new_size == (width, height):
            return image
        return image.resize(new_size, Image.Resampling.LANCZOS)


@dataclass
class CropOptions:
    x: int = 0
    y: int = 0
    width: Optional[int] = None
    height: Optional[int] = None
    aspect_ratio: Optional[str] = None

    @property
    def ratio(self) -> Optional[float]:
        if not self.aspect_ratio:
            return None
        w, h = self.aspect_ratio.split(':')
        return float(w) / float(h)

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> 'CropOptions':
        values = _decode_options(cls, options, {
            'x': _non_negative_int,
            'y': _non_negative_int,
            'width': _positive_int,
            'height': _positive_int,
        })
        aspect_ratio = values.get('aspect_ratio')
        if aspect_ratio is not None:
            aspect_ratio = str(aspect_ratio)
            parts = aspect_ratio.split(':')
            try:
                if len(parts) != 2 or float(parts[0]) <= 0 or float(parts[1]) <= 0:
                    raise ValueError(aspect_ratio)
            except ValueError:
                raise InvalidAdjustmentOptions(
                    f"Option 'aspect_ratio' must look like '16:9', got {aspect_ratio!r}"
                ) from None
            values['aspect_ratio'] = aspect_ratio
        elif not (values.get('width') and values.get('height')):
            raise InvalidAdjustmentOptions(
                "Crop needs either 'aspect_ratio' or both 'width' and 'height'"
            )
        return cls(**values)


class CropImageAdjustment(ImageAdjustment):
    """Crop a fixed box, or the largest centred box of a given aspect ratio."""

    type_name = 'crop'

    def configure(self, options: Mapping[str, Any]) -> None:
        self.options = CropOptions.from_options(options)

    def apply(self, image: Image.Image) -> Image.Image:
        width, height = image.size
        box = self._crop_box(width, height)
        if box == (0, 0, width, height):
            return image
        return image.crop(box)

    def _crop_box(self, width: int, height: int) -> Tuple[int, int, int, int]:
        o = self.options
        ratio = o.ratio
        if ratio:
            if width / height > ratio:
                crop_w, crop_h = round(height * ratio), height
            else:
                crop_w, crop_h = width, round(width / ratio)
            left = (width - crop_w) // 2
            top = (height - crop_h) // 2
            return left, top, left + crop_w, top + crop_h

        left, top = min(o.x, width - 1), min(o.y, height - 1)
        return left, top, min(left + o.width, width), min(top + o.height, height)


@dataclass
class QualityOptions:
    quality: int = 90

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> 'QualityOptions':
        values = _decode_options(cls, options, {'quality': _positive_int})
        if values.get('quality', 90) > 100:
            raise InvalidAdjustmentOptions("Option 'quality' must be between 1 and 100")
        return cls(**values)


class QualityImageAdjustment(ImageAdjustment):
    """Set the encoder quality. Leaves pixels untouched."""

    type_name = 'quality'

    def configure(self, options: Mapping[str, Any]) -> None:
        self.options = QualityOptions.from_options(options)

    def apply(self, image: Image.Image) -> Image.Image:
        return image

    def save_options(self) -> dict:
        return {'quality': self.options.quality}


AdjustmentFactory = Callable[[], Any]


class AdjustmentRegistry:
    """
    Maps adjustment type tags to factories.

    Unregistered tags fail with UnknownAdjustmentType; factories that do not
    produce an ImageAdjustment fail with InvalidAdjustmentType.
    """

    def __init__(self):
        self._factories: Dict[str, AdjustmentFactory] = {}

    def register(self, type_name: str, factory: AdjustmentFactory) -> None:
        self._factories[type_name] = factory

    def __contains__(self, type_name: str) -> bool:
        return type_name in self._factories

    @property
    def types(self) -> list:
        return sorted(self._factories)

    def create(self, type_name: str) -> ImageAdjustment:
        factory = self._factories.get(type_name)
        if factory is None:
            raise UnknownAdjustmentType(type_name)
        adjustment = factory()
        if not isinstance(adjustment, ImageAdjustment):
            raise InvalidAdjustmentType(type_name)
        return adjustment


def default_registry() -> AdjustmentRegistry:
    """Registry with the built-in adjustments."""
    registry = AdjustmentRegistry()
    for adjustment_class in (ResizeImageAdjustment, CropImageAdjustment, QualityImageAdjustment):
        registry.register(adjustment_class.type_name, adjustment_class)
    return registry
