"""Run-scoped generation state: model rotation, rate limits, failure streak."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence


@dataclass
class RunState:
    """Mutable bookkeeping for a single refresh run.

    A fresh instance is created per run; nothing here is shared between runs.
    """

    models: tuple[str, ...]
    max_consecutive_failures: int = 3
    rate_limited: set[str] = field(default_factory=set)
    consecutive_failures: int = 0
    ai_calls: int = 0
    _cursor: int = 0

    @classmethod
    def for_models(cls, models: Sequence[str], *, max_consecutive_failures: int = 3) -> RunState:
        # Order matters for rotation; duplicates would defeat the exhaustion check.
        unique = tuple(dict.fromkeys(model for model in models if model))
        return cls(models=unique, max_consecutive_failures=max_consecutive_failures)

    def select_model(self) -> str | None:
        """Next model in round-robin order that is not rate-limited, or None."""
        count = len(self.models)
        for offset in range(count):
            index = (self._cursor + offset) % count
            model = self.models[index]
            if model not in self.rate_limited:
                self._cursor = (index + 1) % count
                return model
        return None

    def mark_rate_limited(self, model: str) -> None:
        self.rate_limited.add(model)

    def record_call(self) -> None:
        self.ai_calls += 1

    def record_success(self) -> None:
        self.consecutive_failures = 0

    def record_failure(self) -> None:
        self.consecutive_failures += 1

    @property
    def all_models_exhausted(self) -> bool:
        return all(model in self.rate_limited for model in self.models)

    @property
    def generation_halted(self) -> bool:
        return (
            self.consecutive_failures >= self.max_consecutive_failures
            or self.all_models_exhausted
        )
