"""
Settings - Paths and tuning for a variantgen run.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Settings:
    """
    Run configuration, read from VARIANTGEN_* environment variables.

    Attributes:
        presets_file: JSON preset catalog
        assets_file: JSON asset repository
        redirects_file: JSON redirect storage (None disables redirects)
        storage_root: Local resource storage directory
        public_path: URL path prefix for published resources
        batch_size: Generations between persistence checkpoints
        env_errors: Environment values that could not be parsed
    """
    presets_file: Optional[str] = None
    assets_file: Optional[str] = None
    redirects_file: Optional[str] = None
    storage_root: Optional[str] = None
    public_path: str = '/_Resources/Persistent'
    batch_size: int = 10
    env_errors: List[str] = field(default_factory=list, repr=False)

    @classmethod
    def from_env(cls) -> 'Settings':
        env_errors = []
        raw_batch_size = os.getenv('VARIANTGEN_BATCH_SIZE', '10')
        try:
            batch_size = int(raw_batch_size)
        except ValueError:
            env_errors.append(f"VARIANTGEN_BATCH_SIZE must be an integer, got {raw_batch_size!r}")
            batch_size = 10

        return cls(
            presets_file=os.getenv('VARIANTGEN_PRESETS'),
            assets_file=os.getenv('VARIANTGEN_ASSETS'),
            redirects_file=os.getenv('VARIANTGEN_REDIRECTS'),
            storage_root=os.getenv('VARIANTGEN_STORAGE_ROOT'),
            public_path=os.getenv('VARIANTGEN_PUBLIC_PATH', '/_Resources/Persistent'),
            batch_size=batch_size,
            env_errors=env_errors,
        )

    def validate(self, require_storage: bool = True) -> List[str]:
        """Return a list of configuration errors (empty if valid)."""
        errors = list(self.env_errors)
        if not self.presets_file:
            errors.append("Preset file is not set (VARIANTGEN_PRESETS or --presets)")
        elif not os.path.isfile(self.presets_file):
            errors.append(f"Preset file not found: {self.presets_file}")
        if not self.assets_file:
            errors.append("Asset file is not set (VARIANTGEN_ASSETS or --assets)")
        if require_storage and not self.storage_root:
            errors.append("Storage root is not set (VARIANTGEN_STORAGE_ROOT or --storage-root)")
        if self.batch_size < 1:
            errors.append(f"Batch size must be at least 1, got {self.batch_size}")
        return errors
