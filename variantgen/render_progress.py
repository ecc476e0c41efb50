"""
RenderProgress - Tracks and displays batch render progress.
"""

import logging
from typing import Optional

from .models import ImageVariant
from .render_stats import RenderStats


class RenderProgress:
    """
    Tracks and displays render progress with optional per-variant output.
    """

    def __init__(
        self,
        show_variants: bool = False,
        log_interval: int = 100,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize progress tracker.

        Args:
            show_variants: If True, print each variant as it's generated
            log_interval: Log summary progress every N combinations (when not show_variants)
            logger: Optional logger instance
        """
        self.show_variants = show_variants
        self.log_interval = log_interval
        self.logger = logger or logging.getLogger(__name__)
        self.last_logged = 0

    def on_start(self, stats: RenderStats) -> None:
        self.logger.info(f"Checking up to {stats.total_expected:,} variants for existence...")

    def on_variant_generated(self, variant: ImageVariant) -> None:
        if self.show_variants:
            size = variant.resource.size if variant.resource else 0
            print(
                f"  [OK] {variant.original_asset.identifier} -> "
                f"{variant.preset_identifier}/{variant.preset_variant_name} ({size} bytes)"
            )

    def on_checkpoint(self, stats: RenderStats) -> None:
        self.logger.debug(f"Checkpoint after {stats.generated} variants")

    def on_progress_update(self, stats: RenderStats) -> None:
        """
        Called after each combination is walked.

        Args:
            stats: Current render statistics
        """
        if not self.show_variants and stats.considered - self.last_logged >= self.log_interval:
            self.last_logged = stats.considered
            self.logger.info(
                f"Progress: {stats.considered}/{stats.total_expected} checked, "
                f"{stats.generated} generated ({stats.rate_per_minute:.1f}/min)"
            )

    def on_finish(self, stats: RenderStats) -> None:
        self.logger.info(stats.result_message)

    def __call__(self, stats: RenderStats) -> None:
        """Allow use as callback for stats updates."""
        self.on_progress_update(stats)
