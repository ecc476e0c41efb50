"""
Preset catalog - named groups of variant configurations.

Loaded once from a JSON document and treated as immutable afterwards.
"""

import json
import re
from collections import OrderedDict
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

from .exceptions import PresetConfigurationError


@dataclass(frozen=True)
class AdjustmentConfiguration:
    """One adjustment descriptor: a type tag plus its raw options."""
    type: str
    options: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> 'AdjustmentConfiguration':
        if not isinstance(data, dict) or not data.get('type'):
            raise PresetConfigurationError(f"Adjustment needs a 'type': {data!r}")
        options = data.get('options') or {}
        if not isinstance(options, dict):
            raise PresetConfigurationError(f"Adjustment options must be a mapping: {options!r}")
        return cls(type=data['type'], options=MappingProxyType(dict(options)))


@dataclass(frozen=True)
class VariantConfiguration:
    """A named variant: an ordered chain of adjustments."""
    identifier: str
    adjustments: Tuple[AdjustmentConfiguration, ...] = ()

    @classmethod
    def from_dict(cls, identifier: str, data: dict) -> 'VariantConfiguration':
        raw_adjustments = (data or {}).get('adjustments', [])
        if isinstance(raw_adjustments, dict):
            # keyed form, declaration order kept
            raw_adjustments = list(raw_adjustments.values())
        if not isinstance(raw_adjustments, list):
            raise PresetConfigurationError(
                f"Adjustments of variant '{identifier}' must be a list"
            )
        return cls(
            identifier=identifier,
            adjustments=tuple(AdjustmentConfiguration.from_dict(a) for a in raw_adjustments),
        )


class VariantPreset:
    """
    A preset: media-type applicability rule plus variant configurations.
    """

    def __init__(
        self,
        identifier: str,
        media_type_patterns: Tuple[str, ...],
        variants: 'OrderedDict[str, VariantConfiguration]',
        label: str = ''
    ):
        self.identifier = identifier
        self.label = label or identifier
        self.media_type_patterns = tuple(media_type_patterns)
        self._patterns = tuple(re.compile(p) for p in self.media_type_patterns)
        self._variants = variants

    def variants(self) -> Mapping[str, VariantConfiguration]:
        return MappingProxyType(self._variants)

    def matches_media_type(self, media_type: str) -> bool:
        return any(p.search(media_type) for p in self._patterns)

    @classmethod
    def from_dict(cls, identifier: str, data: dict) -> 'VariantPreset':
        if not isinstance(data, dict):
            raise PresetConfigurationError(f"Preset '{identifier}' must be a mapping")
        patterns = data.get('mediaTypePatterns', data.get('media_type_patterns'))
        if not patterns or not isinstance(patterns, list):
            raise PresetConfigurationError(
                f"Preset '{identifier}' needs a non-empty list of mediaTypePatterns"
            )
        for pattern in patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                raise PresetConfigurationError(
                    f"Invalid media type pattern {pattern!r} in preset '{identifier}': {e}"
                ) from e

        raw_variants = data.get('variants', {})
        if not isinstance(raw_variants, dict):
            raise PresetConfigurationError(f"Variants of preset '{identifier}' must be a mapping")
        variants = OrderedDict(
            (name, VariantConfiguration.from_dict(name, variant_data))
            for name, variant_data in raw_variants.items()
        )
        return cls(identifier, tuple(patterns), variants, label=data.get('label', ''))

    def __repr__(self) -> str:
        return f"VariantPreset({self.identifier!r}, variants={list(self._variants)})"


class PresetCatalog:
    """
    Immutable, ordered collection of presets.

    Iteration order is declaration order in the source document.
    """

    def __init__(self, presets: 'OrderedDict[str, VariantPreset]'):
        self._presets = presets

    def presets(self) -> Mapping[str, VariantPreset]:
        return MappingProxyType(self._presets)

    def get(self, identifier: str):
        return self._presets.get(identifier)

    @property
    def variant_count(self) -> int:
        """Number of configured variants over all presets."""
        return sum(len(p.variants()) for p in self._presets.values())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PresetCatalog':
        if not isinstance(data, dict):
            raise PresetConfigurationError("Preset document must be a mapping")
        raw_presets = data.get('presets', {})
        if not isinstance(raw_presets, dict):
            raise PresetConfigurationError("'presets' must be a mapping")
        return cls(OrderedDict(
            (identifier, VariantPreset.from_dict(identifier, preset_data))
            for identifier, preset_data in raw_presets.items()
        ))

    @classmethod
    def load(cls, filepath: str) -> 'PresetCatalog':
        """Load a catalog from a JSON file."""
        try:
            with open(Path(filepath), 'r') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise PresetConfigurationError(f"Preset file {filepath} is not valid JSON: {e}") from e
        return cls.from_dict(data)
