"""
Command Line Interface for variant batch rendering.
"""

import argparse
import logging
import sys
import urllib3
from typing import List, Optional

from .asset_repository import JsonAssetRepository
from .asset_service import AssetService
from .batch_renderer import BatchRenderer
from .exceptions import VariantgenError
from .models import Document, Image
from .presets import PresetCatalog
from .redirects import JsonRedirectStorage
from .render_progress import RenderProgress
from .reporter import Reporter
from .resource_storage import LocalConfig, LocalResourceStorage
from .s3_client import S3ResourceStorage
from .s3_config import S3Config
from .settings import Settings
from .variant_generator import AssetVariantGenerator
from .variant_renderer import VariantRenderer


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.getLogger('boto3').setLevel(logging.WARNING)
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('PIL').setLevel(logging.WARNING)

    return logging.getLogger('variantgen')


def get_settings(args: argparse.Namespace) -> Settings:
    """Get settings from environment and CLI overrides."""
    settings = Settings.from_env()

    if getattr(args, 'presets', None):
        settings.presets_file = args.presets
    if getattr(args, 'assets', None):
        settings.assets_file = args.assets
    if getattr(args, 'redirects_file', None):
        settings.redirects_file = args.redirects_file
    if getattr(args, 'storage_root', None):
        settings.storage_root = args.storage_root
    if getattr(args, 'public_path', None):
        settings.public_path = args.public_path
    if getattr(args, 'batch_size', None):
        settings.batch_size = args.batch_size
        settings.env_errors = []

    return settings


def get_storage(args: argparse.Namespace, settings: Settings, logger: logging.Logger):
    """
    Get resource storage based on arguments.

    Raises:
        ValueError: if the selected storage is misconfigured
    """
    if getattr(args, 's3', False):
        config = S3Config.from_env()
        errors = config.validate()
        if errors:
            for error in errors:
                logger.error(error)
            raise ValueError("S3 configuration invalid")
        if not config.verify_ssl:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        logger.info(f"Storage: S3 {config.endpoint} {config.bucket}/{config.prefix}")
        return S3ResourceStorage(config, public_base=settings.public_path, logger=logger)

    config = LocalConfig(root_path=settings.storage_root, public_path=settings.public_path)
    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        raise ValueError("Local storage configuration invalid")
    logger.info(f"Storage: Local filesystem {config.root_path}")
    return LocalResourceStorage(config, logger)


def load_settings(args: argparse.Namespace, logger: logging.Logger) -> Optional[Settings]:
    """Resolve and validate settings, logging every problem."""
    settings = get_settings(args)
    errors = settings.validate(require_storage=not getattr(args, 's3', False))
    if errors:
        for error in errors:
            logger.error(error)
        return None
    return settings


def build_generator(settings: Settings, storage, logger: logging.Logger) -> AssetVariantGenerator:
    catalog = PresetCatalog.load(settings.presets_file)
    renderer = VariantRenderer(storage, logger=logger)
    return AssetVariantGenerator(catalog, renderer, logger=logger)


def cmd_render(args: argparse.Namespace) -> int:
    """Execute render command."""
    logger = setup_logging(args.verbose)
    if args.limit is not None and args.limit < 1:
        logger.error("--limit must be a positive integer")
        return 1

    settings = load_settings(args, logger)
    if settings is None:
        return 1

    try:
        storage = get_storage(args, settings, logger)
        generator = build_generator(settings, storage, logger)
        repository = JsonAssetRepository(settings.assets_file, logger=logger)
    except ValueError:
        return 1
    except VariantgenError as e:
        logger.error(f"Failed to load presets: {e}")
        return 1

    try:
        renderer = BatchRenderer(repository, generator, batch_size=settings.batch_size, logger=logger)

        progress = None
        if not args.quiet:
            progress = RenderProgress(show_variants=args.show_variants, logger=logger)

        stats = renderer.render_missing_variants(
            limit=args.limit,
            recreate_existing=args.recreate,
            progress=progress
        )

        if not args.quiet:
            print()
            print(stats.result_message)
            print(f"Skipped: {stats.skipped}")
            print(f"Time: {stats.elapsed_seconds:.1f}s")

        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as e:
        logger.exception(f"Render failed: {e}")
        return 1


def cmd_replace(args: argparse.Namespace) -> int:
    """Execute replace command."""
    logger = setup_logging(args.verbose)
    settings = load_settings(args, logger)
    if settings is None:
        return 1

    try:
        storage = get_storage(args, settings, logger)
        generator = build_generator(settings, storage, logger)
        repository = JsonAssetRepository(settings.assets_file, logger=logger)
    except ValueError:
        return 1
    except VariantgenError as e:
        logger.error(f"Failed to load presets: {e}")
        return 1

    asset = repository.find_by_identifier(args.asset)
    if asset is None:
        logger.error(f"Asset not found: {args.asset}")
        return 1

    redirect_storage = None
    if args.redirects:
        if not settings.redirects_file:
            logger.error("--redirects needs a redirect file (VARIANTGEN_REDIRECTS or --redirects-file)")
            return 1
        redirect_storage = JsonRedirectStorage(settings.redirects_file, logger=logger)

    try:
        resource = storage.import_file(args.file)
        service = AssetService(repository, generator, storage, redirect_storage, logger=logger)
        mapping = service.replace_asset_resource(
            asset,
            resource,
            keep_original_filename=args.keep_filename,
            generate_redirects=args.redirects
        )
        repository.persist_all()

        for original_path, new_path in mapping.items():
            print(f"  {original_path} -> {new_path}")
        return 0

    except FileNotFoundError:
        logger.error(f"File not found: {args.file}")
        return 1
    except Exception as e:
        logger.exception(f"Replace failed: {e}")
        return 1


def cmd_import(args: argparse.Namespace) -> int:
    """Execute import command: register files as new assets."""
    logger = setup_logging(args.verbose)
    settings = load_settings(args, logger)
    if settings is None:
        return 1

    try:
        storage = get_storage(args, settings, logger)
    except ValueError:
        return 1

    repository = JsonAssetRepository(settings.assets_file, logger=logger)
    try:
        for filepath in args.files:
            resource = storage.import_file(filepath)
            asset_class = Image if resource.media_type.startswith('image/') else Document
            identifier = resource.sha1
            if repository.find_by_identifier(identifier) is not None:
                logger.info(f"Already imported: {filepath}")
                continue
            repository.add(asset_class(identifier, resource))
            logger.info(f"Imported {filepath} as {asset_class.kind} {identifier}")
        repository.persist_all()
        return 0
    except FileNotFoundError as e:
        logger.error(f"File not found: {e.filename}")
        return 1


def cmd_report(args: argparse.Namespace) -> int:
    """Execute report command."""
    logger = setup_logging(args.verbose)
    settings = get_settings(args)
    if not settings.presets_file:
        logger.error("Preset file is not set (VARIANTGEN_PRESETS or --presets)")
        return 1

    try:
        catalog = PresetCatalog.load(settings.presets_file)
    except FileNotFoundError:
        logger.error(f"Preset file not found: {settings.presets_file}")
        return 1
    except VariantgenError as e:
        logger.error(f"Failed to load presets: {e}")
        return 1

    reporter = Reporter()
    if args.type == 'presets':
        reporter.report_presets(catalog)
    elif args.type == 'summary':
        if not settings.assets_file:
            logger.error("Asset file is not set (VARIANTGEN_ASSETS or --assets)")
            return 1
        reporter.report_summary(catalog, JsonAssetRepository(settings.assets_file, logger=logger))

    return 0


def add_config_arguments(parser: argparse.ArgumentParser) -> None:
    """Add configuration arguments to a parser."""
    group = parser.add_argument_group('Configuration')
    group.add_argument('--presets', metavar='FILE', help='Override VARIANTGEN_PRESETS')
    group.add_argument('--assets', metavar='FILE', help='Override VARIANTGEN_ASSETS')
    group.add_argument('--storage-root', metavar='PATH', help='Override VARIANTGEN_STORAGE_ROOT')
    group.add_argument('--public-path', help='Override VARIANTGEN_PUBLIC_PATH')
    group.add_argument('--s3', action='store_true', help='Use S3 storage configured by S3_* variables')


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='variantgen',
        description='Render and maintain preset-based image variants',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Workflow:
  1. Import:  python -m variantgen import photo1.jpg photo2.png
  2. Report:  python -m variantgen report --type summary
  3. Render:  python -m variantgen render --limit 100
  4. Replace: python -m variantgen replace <asset> new.jpg --redirects

Configuration comes from VARIANTGEN_* environment variables, overridable
per command.
"""
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    render_parser = subparsers.add_parser('render', help='Render missing variants')
    render_parser.add_argument('--limit', type=int, metavar='N',
                               help='Stop after N generated variants to bound memory use')
    render_parser.add_argument('--recreate', action='store_true',
                               help='Render existing variants again, too')
    render_parser.add_argument('--batch-size', type=int, metavar='N',
                               help='Variants between checkpoints (default: 10)')
    render_parser.add_argument('-q', '--quiet', action='store_true', help='Only display errors')
    render_parser.add_argument('--show-variants', action='store_true',
                               help='Print each variant as it is generated')
    render_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_config_arguments(render_parser)

    replace_parser = subparsers.add_parser('replace', help='Replace the resource of an asset')
    replace_parser.add_argument('asset', help='Asset identifier')
    replace_parser.add_argument('file', help='New image file')
    replace_parser.add_argument('--keep-filename', action='store_true',
                                help='Keep the filename of the current resource')
    replace_parser.add_argument('--redirects', action='store_true',
                                help='Record redirects from old to new public paths')
    replace_parser.add_argument('--redirects-file', metavar='FILE', help='Override VARIANTGEN_REDIRECTS')
    replace_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_config_arguments(replace_parser)

    import_parser = subparsers.add_parser('import', help='Import files as assets')
    import_parser.add_argument('files', nargs='+', help='Files to import')
    import_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_config_arguments(import_parser)

    report_parser = subparsers.add_parser('report', help='Report on presets and variant coverage')
    report_parser.add_argument('-t', '--type', choices=['presets', 'summary'],
                               default='presets', help='Report type')
    report_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_config_arguments(report_parser)

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'render':
        return cmd_render(parsed_args)
    elif parsed_args.command == 'replace':
        return cmd_replace(parsed_args)
    elif parsed_args.command == 'import':
        return cmd_import(parsed_args)
    elif parsed_args.command == 'report':
        return cmd_report(parsed_args)

    return 1
