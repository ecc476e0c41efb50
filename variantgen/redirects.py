"""
Redirect storage - permanent redirects from old public resource paths.
"""

import json
import logging
from dataclasses import dataclass, asdict, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator, Optional


@dataclass
class Redirect:
    """
    A redirect from one public path to another.

    Attributes:
        source_path: Old path
        target_path: New path
        status_code: HTTP status code (301 for permanent)
        created_at: ISO timestamp
    """
    source_path: str
    target_path: str
    status_code: int = 301
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'Redirect':
        return cls(**data)


class RedirectStorage:
    """In-memory redirect storage keyed by source path."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._redirects: Dict[str, Redirect] = {}

    def get_one_by_source_path(self, source_path: str) -> Optional[Redirect]:
        return self._redirects.get(source_path)

    def add_redirect(self, source_path: str, target_path: str, status_code: int = 301) -> Redirect:
        redirect = Redirect(source_path, target_path, status_code)
        self._redirects[source_path] = redirect
        self.logger.debug(f"Redirect {status_code}: {source_path} -> {target_path}")
        return redirect

    def __iter__(self) -> Iterator[Redirect]:
        return iter(self._redirects.values())

    def __len__(self) -> int:
        return len(self._redirects)


class JsonRedirectStorage(RedirectStorage):
    """Redirect storage that rewrites a JSON file on every change."""

    def __init__(self, filepath: str, logger: Optional[logging.Logger] = None):
        super().__init__(logger)
        self.path = Path(filepath)
        if self.path.exists():
            with open(self.path, 'r') as f:
                for data in json.load(f).get('redirects', []):
                    redirect = Redirect.from_dict(data)
                    self._redirects[redirect.source_path] = redirect

    def add_redirect(self, source_path: str, target_path: str, status_code: int = 301) -> Redirect:
        redirect = super().add_redirect(source_path, target_path, status_code)
        self.save()
        return redirect

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w') as f:
            json.dump({'redirects': [r.to_dict() for r in self]}, f, indent=2)
