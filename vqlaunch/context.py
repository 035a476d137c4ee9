"""Shared state handed to every CLI command."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from .config import RunConfig
from .orchestrator import Orchestrator


@dataclass
class CommandContext:
    """Holds the run configuration and lazily creates the orchestrator."""

    config: RunConfig = field(default_factory=RunConfig)
    json_output: bool = False
    orchestrator_factory: Callable[..., Orchestrator] = Orchestrator
    _orchestrator: Optional[Orchestrator] = field(default=None, init=False, repr=False)

    def orchestrator(self) -> Orchestrator:
        if self._orchestrator is None:
            self._orchestrator = self.orchestrator_factory(self.config)
        return self._orchestrator
