"""
RenderStats - Statistics for a batch render run.
"""

import time
from dataclasses import dataclass, field


@dataclass
class RenderStats:
    """
    Statistics for a batch render run.

    Attributes:
        total_expected: Variants configured for all assets (upper bound, for progress only)
        considered: Asset/preset/variant combinations walked so far
        generated: Variants created or recreated
        skipped: Combinations skipped (already present or not applicable)
        checkpoints: Number of persistence checkpoints
        stopped_by_limit: True if the run ended because the limit was reached
        start_time: Start timestamp
    """
    total_expected: int = 0
    considered: int = 0
    generated: int = 0
    skipped: int = 0
    checkpoints: int = 0
    stopped_by_limit: bool = False
    start_time: float = field(default_factory=time.time)

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time in seconds."""
        return time.time() - self.start_time

    @property
    def rate_per_minute(self) -> float:
        """Generated variants per minute."""
        if self.elapsed_seconds > 0:
            return self.generated / self.elapsed_seconds * 60
        return 0.0

    @property
    def remaining_count(self) -> int:
        """Combinations not yet walked."""
        return max(self.total_expected - self.considered, 0)

    @property
    def result_message(self) -> str:
        if self.stopped_by_limit:
            return f"Generated {self.generated} variants, exiting after reaching limit"
        return f"Generated {self.generated} variants"
