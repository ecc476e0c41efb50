"""Tests for BatchRenderer class."""

from unittest.mock import MagicMock

import pytest

from variantgen.asset_repository import AssetRepository
from variantgen.batch_renderer import BatchRenderer
from variantgen.exceptions import UnknownAdjustmentType
from variantgen.presets import PresetCatalog
from variantgen.render_progress import RenderProgress
from variantgen.variant_generator import AssetVariantGenerator


class TestBatchRenderer:
    """Tests for BatchRenderer class."""

    @pytest.fixture
    def thumbnails_generator(self, thumbnails_catalog, stub_renderer, logger):
        """Generator with only the 'thumbnails' preset (small, large)."""
        return AssetVariantGenerator(thumbnails_catalog, stub_renderer, logger=logger)

    @pytest.fixture
    def populated_repository(self, repository, make_image):
        """Repository with 15 images."""
        for i in range(15):
            repository.add(make_image(f'asset-{i:02d}'))
        return repository

    def test_init_rejects_bad_batch_size(self, repository, generator):
        """Test batch size must be positive."""
        with pytest.raises(ValueError):
            BatchRenderer(repository, generator, batch_size=0)

    def test_renders_all_variants_for_bare_asset(self, repository, thumbnails_generator, make_image, logger):
        """Test an asset without variants gets every configured variant."""
        asset = make_image('A')
        repository.add(asset)
        renderer = BatchRenderer(repository, thumbnails_generator, logger=logger)

        stats = renderer.render_missing_variants()

        assert stats.generated == 2
        assert stats.stopped_by_limit is False
        assert sorted(v.identity for v in asset.variants) == [
            ('thumbnails', 'large'), ('thumbnails', 'small'),
        ]

    def test_skips_existing_variants(self, repository, thumbnails_generator, make_image, logger):
        """Test only missing variants are generated."""
        asset = make_image('A')
        repository.add(asset)
        existing = thumbnails_generator.create_one_variant(asset, 'thumbnails', 'small')
        renderer = BatchRenderer(repository, thumbnails_generator, logger=logger)

        stats = renderer.render_missing_variants(recreate_existing=False)

        assert stats.generated == 1
        assert stats.skipped == 1
        assert existing in asset.variants
        assert sorted(v.identity for v in asset.variants) == [
            ('thumbnails', 'large'), ('thumbnails', 'small'),
        ]

    def test_second_run_generates_nothing(self, populated_repository, thumbnails_generator, logger):
        """Test rendering is idempotent across runs."""
        renderer = BatchRenderer(populated_repository, thumbnails_generator, logger=logger)
        renderer.render_missing_variants()

        stats = renderer.render_missing_variants()

        assert stats.generated == 0
        for asset in populated_repository.find_all():
            assert len(asset.variants) == 2

    def test_recreate_existing_regenerates_everything(self, repository, thumbnails_generator, make_image, logger):
        """Test recreate mode replaces existing variants without duplicates."""
        asset = make_image('A')
        repository.add(asset)
        old = thumbnails_generator.create_one_variant(asset, 'thumbnails', 'small')
        renderer = BatchRenderer(repository, thumbnails_generator, logger=logger)

        stats = renderer.render_missing_variants(recreate_existing=True)

        assert stats.generated == 2
        assert old not in asset.variants
        assert len(asset.variants) == 2

    def test_limit_stops_at_exactly_k(self, populated_repository, thumbnails_generator, logger):
        """Test a limit stops the walk after k generations."""
        renderer = BatchRenderer(populated_repository, thumbnails_generator, logger=logger)

        stats = renderer.render_missing_variants(limit=5)

        assert stats.generated == 5
        assert stats.stopped_by_limit is True
        assert 'reaching limit' in stats.result_message
        total = sum(len(a.variants) for a in populated_repository.find_all())
        assert total == 5

    def test_limit_not_reached(self, repository, thumbnails_generator, make_image, logger):
        """Test a limit larger than the work ends exhaustively."""
        repository.add(make_image('A'))
        renderer = BatchRenderer(repository, thumbnails_generator, logger=logger)

        stats = renderer.render_missing_variants(limit=10)

        assert stats.generated == 2
        assert stats.stopped_by_limit is False

    def test_limit_must_be_positive(self, repository, thumbnails_generator):
        """Test a zero limit is rejected."""
        renderer = BatchRenderer(repository, thumbnails_generator)

        with pytest.raises(ValueError):
            renderer.render_missing_variants(limit=0)

    def test_checkpoint_every_tenth_generation(self, populated_repository, thumbnails_generator, logger):
        """Test persist_all is called after every 10th generation plus once at the end."""
        populated_repository.persist_all = MagicMock()
        renderer = BatchRenderer(populated_repository, thumbnails_generator, logger=logger)

        stats = renderer.render_missing_variants()

        # 30 generations: checkpoints at 10, 20, 30
        assert stats.generated == 30
        assert populated_repository.persist_all.call_count == 3
        assert stats.checkpoints == 3

    def test_final_flush_for_remainder(self, populated_repository, thumbnails_generator, logger):
        """Test generations after the last checkpoint are flushed at the end."""
        populated_repository.persist_all = MagicMock()
        renderer = BatchRenderer(populated_repository, thumbnails_generator, logger=logger)

        renderer.render_missing_variants(limit=25)

        # checkpoints at 10 and 20, then the 5 remaining
        assert populated_repository.persist_all.call_count == 3

    def test_updates_asset_per_generation(self, repository, thumbnails_generator, make_image):
        """Test the repository is told about every mutated asset."""
        repository.add(make_image('A'))
        repository.update = MagicMock(wraps=repository.update)
        renderer = BatchRenderer(repository, thumbnails_generator)

        renderer.render_missing_variants()

        assert repository.update.call_count == 2

    def test_deterministic_asset_order(self, repository, thumbnails_generator, make_image):
        """Test assets are visited in ascending identifier order."""
        for identifier in ('c', 'a', 'b'):
            repository.add(make_image(identifier))
        renderer = BatchRenderer(repository, thumbnails_generator)

        renderer.render_missing_variants(limit=2)

        assert len(repository.find_by_identifier('a').variants) == 2
        assert repository.find_by_identifier('b').variants == []

    def test_non_image_assets_are_skipped(self, repository, thumbnails_generator, make_image):
        """Test documents are walked but produce nothing."""
        from variantgen.models import Document, Resource
        repository.add(Document('doc', Resource('d' * 40, 'a.pdf', 'application/pdf')))
        repository.add(make_image('img'))
        renderer = BatchRenderer(repository, thumbnails_generator)

        stats = renderer.render_missing_variants()

        assert stats.generated == 2
        assert stats.skipped == 2

    def test_generation_error_stops_batch(self, repository, stub_renderer, make_image):
        """Test a misconfigured catalog aborts the run, keeping checkpointed work."""
        catalog = PresetCatalog.from_dict({'presets': {
            'good': {'mediaTypePatterns': ['^image/'], 'variants': {
                'v': {'adjustments': [{'type': 'resize', 'options': {'width': 10}}]},
            }},
            'broken': {'mediaTypePatterns': ['^image/'], 'variants': {
                'v': {'adjustments': [{'type': 'sepia'}]},
            }},
        }})
        generator = AssetVariantGenerator(catalog, stub_renderer)
        asset = make_image('A')
        repository.add(asset)
        renderer = BatchRenderer(repository, generator, batch_size=1)

        with pytest.raises(UnknownAdjustmentType):
            renderer.render_missing_variants()

        assert [v.identity for v in asset.variants] == [('good', 'v')]
        assert repository.persist_count == 1

    def test_index_is_a_snapshot(self, repository, thumbnails_generator, make_image, mocker):
        """Test the existence index is built once per run."""
        repository.add(make_image('A'))
        spy = mocker.spy(repository, 'find_asset_identifiers_with_variants')
        renderer = BatchRenderer(repository, thumbnails_generator)

        renderer.render_missing_variants()

        assert spy.call_count == 1

    def test_can_be_stopped(self, populated_repository, thumbnails_generator):
        """Test stopping before the run generates nothing."""
        renderer = BatchRenderer(populated_repository, thumbnails_generator)
        renderer.stop()

        stats = renderer.render_missing_variants()

        assert stats.generated == 0

    def test_stop_applies_to_one_run(self, populated_repository, thumbnails_generator):
        """Test a stopped renderer can be run again."""
        renderer = BatchRenderer(populated_repository, thumbnails_generator)
        renderer.stop()
        renderer.render_missing_variants()

        stats = renderer.render_missing_variants()

        assert stats.generated > 0
        assert stats.considered == stats.total_expected

    def test_reports_progress(self, repository, thumbnails_generator, make_image):
        """Test progress callbacks are invoked."""
        repository.add(make_image('A'))
        progress = MagicMock(spec=RenderProgress)
        renderer = BatchRenderer(repository, thumbnails_generator)

        stats = renderer.render_missing_variants(progress=progress)

        progress.on_start.assert_called_once()
        assert progress.on_variant_generated.call_count == 2
        assert progress.on_progress_update.call_count == 2
        progress.on_finish.assert_called_once_with(stats)

    def test_total_expected(self, populated_repository, generator):
        """Test total_expected counts configured variants times assets."""
        renderer = BatchRenderer(populated_repository, generator)

        stats = renderer.render_missing_variants(limit=1)

        # thumbnails: small, large; squares: square
        assert stats.total_expected == 3 * 15
