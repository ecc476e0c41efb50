"""
BatchRenderer - Renders missing preset variants for all assets.
"""

import logging
from typing import Optional

from .asset_repository import AssetRepository
from .existence_index import build_existence_index
from .render_progress import RenderProgress
from .render_stats import RenderStats
from .variant_generator import AssetVariantGenerator


class BatchRenderer:
    """
    Walks every asset, preset and variant and generates what is missing.

    With recreate_existing, every configured variant is regenerated. Changes
    are checkpointed every batch_size generations so long runs keep memory
    and transaction size bounded. Generation errors stop the run; work
    checkpointed before the error is kept.
    """

    def __init__(
        self,
        repository: AssetRepository,
        generator: AssetVariantGenerator,
        batch_size: int = 10,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize batch renderer.

        Args:
            repository: Asset repository
            generator: Variant generator
            batch_size: Generations between persistence checkpoints
            logger: Optional logger instance
        """
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.repository = repository
        self.generator = generator
        self.batch_size = batch_size
        self.logger = logger or logging.getLogger(__name__)
        self.stats = RenderStats()
        self._pending = 0
        self._stop_requested = False

    def stop(self) -> None:
        """Request the renderer to stop after the current variant."""
        self._stop_requested = True

    def render_missing_variants(
        self,
        limit: Optional[int] = None,
        recreate_existing: bool = False,
        progress: Optional[RenderProgress] = None
    ) -> RenderStats:
        """
        Render variants missing from the existence index.

        Args:
            limit: Stop after this many generated variants
            recreate_existing: Regenerate variants that already exist
            progress: Optional progress tracker

        Returns:
            RenderStats with results
        """
        if limit is not None and limit < 1:
            raise ValueError("limit must be a positive integer")

        presets = self.generator.get_variant_presets()
        configured_variants = sum(len(preset.variants()) for preset in presets.values())
        self.stats = RenderStats(total_expected=configured_variants * self.repository.count_all())
        self._pending = 0

        if progress:
            progress.on_start(self.stats)

        # Snapshot for the whole run; our own writes are not re-read from it.
        existence_index = build_existence_index(self.repository)

        mode_str = " [RECREATE]" if recreate_existing else ""
        limit_str = f" (limited to {limit})" if limit else ""
        self.logger.info(f"Rendering variants for {len(existence_index):,} assets{mode_str}{limit_str}")

        try:
            self._walk(existence_index, presets, limit, recreate_existing, progress)
        finally:
            # A stop request ends only the current run.
            self._stop_requested = False
        if self._pending:
            self._checkpoint(progress)

        if progress:
            progress.on_finish(self.stats)

        self.logger.info(
            f"Render complete: {self.stats.generated} generated, {self.stats.skipped} skipped "
            f"({self.stats.elapsed_seconds:.1f}s)"
        )
        return self.stats

    def _walk(self, existence_index, presets, limit, recreate_existing, progress) -> None:
        stats = self.stats
        for asset_identifier, existing_variants in existence_index.items():
            asset = None
            for preset_identifier, preset in presets.items():
                for variant_name in preset.variants():
                    if self._stop_requested:
                        self.logger.info("Stop requested, halting render")
                        return

                    stats.considered += 1
                    if not recreate_existing and (preset_identifier, variant_name) in existing_variants:
                        stats.skipped += 1
                    else:
                        if asset is None:
                            asset = self.repository.find_by_identifier(asset_identifier)
                        if recreate_existing:
                            variant = self.generator.recreate_variant(asset, preset_identifier, variant_name)
                        else:
                            variant = self.generator.create_one_variant(asset, preset_identifier, variant_name)

                        if variant is None:
                            stats.skipped += 1
                        else:
                            self.repository.update(asset)
                            stats.generated += 1
                            self._pending += 1
                            if progress:
                                progress.on_variant_generated(variant)
                            if stats.generated % self.batch_size == 0:
                                self._checkpoint(progress)
                            if stats.generated == limit:
                                stats.stopped_by_limit = True
                                return

                    if progress:
                        progress.on_progress_update(stats)

    def _checkpoint(self, progress: Optional[RenderProgress]) -> None:
        self.repository.persist_all()
        self._pending = 0
        self.stats.checkpoints += 1
        if progress:
            progress.on_checkpoint(self.stats)
