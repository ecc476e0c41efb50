"""
Reporter - Human-readable reports on presets and variant coverage.
"""

import logging
import sys
from typing import Optional, TextIO

from .existence_index import build_existence_index
from .presets import PresetCatalog


class Reporter:
    """
    Prints catalog listings and coverage summaries.
    """

    def __init__(
        self,
        output: Optional[TextIO] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize reporter.

        Args:
            output: Output stream (default: stdout)
            logger: Optional logger instance
        """
        self.output = output or sys.stdout
        self.logger = logger or logging.getLogger(__name__)

    def _print(self, text: str = "") -> None:
        """Print to output stream."""
        print(text, file=self.output)

    def report_presets(self, catalog: PresetCatalog) -> None:
        """List presets, their media types and adjustment chains."""
        self._print("=" * 60)
        self._print("VARIANT PRESETS")
        self._print("=" * 60)
        for identifier, preset in catalog.presets().items():
            self._print(f"{identifier} ({preset.label})")
            self._print(f"  Media types: {', '.join(preset.media_type_patterns)}")
            for name, variant in preset.variants().items():
                chain = ' -> '.join(
                    f"{a.type}({', '.join(f'{k}={v}' for k, v in a.options.items())})"
                    for a in variant.adjustments
                ) or '(no adjustments)'
                self._print(f"  - {name}: {chain}")
        self._print()
        self._print(f"Total: {len(catalog.presets())} presets, {catalog.variant_count} variants")

    def report_summary(self, catalog: PresetCatalog, repository) -> None:
        """Print how many configured variants exist per preset."""
        index = build_existence_index(repository)
        total_assets = len(index)

        self._print("=" * 60)
        self._print("VARIANT COVERAGE SUMMARY")
        self._print("=" * 60)
        self._print(f"  Assets:      {total_assets:,}")
        self._print()
        self._print(f"  {'Preset/Variant':<30} {'Present':>10} {'Missing':>10}")
        self._print("  " + "-" * 52)

        total_missing = 0
        for preset_identifier, preset in catalog.presets().items():
            for variant_name in preset.variants():
                present = sum(
                    1 for identities in index.values()
                    if (preset_identifier, variant_name) in identities
                )
                missing = total_assets - present
                total_missing += missing
                label = f"{preset_identifier}/{variant_name}"
                self._print(f"  {label:<30} {present:>10,} {missing:>10,}")

        self._print("  " + "-" * 52)
        self._print(f"  Missing variants (upper bound): {total_missing:,}")
