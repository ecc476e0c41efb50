"""
Exceptions raised while loading presets and generating variants.
"""


class VariantgenError(Exception):
    """Base class for all variantgen errors."""


class PresetConfigurationError(VariantgenError):
    """The preset catalog document is malformed."""


class VariantGenerationError(VariantgenError):
    """A single variant could not be generated."""


class UnknownAdjustmentType(VariantGenerationError):
    """No adjustment is registered for the requested type."""

    def __init__(self, adjustment_type: str):
        super().__init__(f'Unknown image variant adjustment type "{adjustment_type}".')
        self.adjustment_type = adjustment_type


class InvalidAdjustmentType(VariantGenerationError):
    """The registered factory does not produce an image adjustment."""

    def __init__(self, adjustment_type: str):
        super().__init__(
            f'Image variant adjustment "{adjustment_type}" does not implement ImageAdjustment.'
        )
        self.adjustment_type = adjustment_type


class InvalidAdjustmentOptions(VariantGenerationError):
    """Adjustment options could not be decoded."""


class AdjustmentApplicationFailed(VariantGenerationError):
    """Adding the adjustment chain to a variant failed."""


class VariantAssetIdentityMismatch(VariantgenError):
    """
    A variant was about to be attached to an asset it does not belong to.

    Not a VariantGenerationError: callers that skip failed variants must
    still stop on it.
    """
