"""
Curve AMM - Deferred Effects.

============================================================
PURPOSE
============================================================
Transfers requested by a call (fee payouts, swap settlement)
are returned as TransferEffect values and executed by an
EffectRunner supplied by the host.

The service runs effects before committing the call's
transaction. A runner that raises rolls back everything the
call recorded, statistics included.

============================================================
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from .token import TransferEffect


logger = logging.getLogger(__name__)


class EffectExecutionError(Exception):
    """A deferred effect could not be carried out."""
    
    def __init__(self, effect: TransferEffect, reason: str):
        self.effect = effect
        self.reason = reason
        super().__init__(
            f"Transfer of {effect.amount} {effect.token} to {effect.recipient} failed: {reason}"
        )


class EffectRunner(ABC):
    """Executes deferred effects for the host."""
    
    @abstractmethod
    def run(self, effects: Sequence[TransferEffect]) -> None:
        """Execute effects in order; raise to abort the call."""
        pass


class RecordingEffectRunner(EffectRunner):
    """Keeps executed effects in memory, in order."""
    
    def __init__(self):
        self.executed: List[TransferEffect] = []
    
    def run(self, effects: Sequence[TransferEffect]) -> None:
        for effect in effects:
            logger.debug(f"Executing transfer {effect.to_dict()}")
        self.executed.extend(effects)


# ============================================================
# MOCK RUNNER (TESTING)
# ============================================================

@dataclass
class MockEffectConfig:
    """Error injection for MockEffectRunner."""
    
    fail_on: Optional[Callable[[TransferEffect], bool]] = None
    """Predicate selecting effects that fail."""
    
    failure_reason: str = "simulated transfer failure"


@dataclass
class MockEffectRunner(EffectRunner):
    """Runner with configurable failures."""
    
    config: MockEffectConfig = field(default_factory=MockEffectConfig)
    executed: List[TransferEffect] = field(default_factory=list)
    
    def run(self, effects: Sequence[TransferEffect]) -> None:
        """Record the batch only if no effect in it fails."""
        for effect in effects:
            if self.config.fail_on is not None and self.config.fail_on(effect):
                raise EffectExecutionError(effect, self.config.failure_reason)
        self.executed.extend(effects)
