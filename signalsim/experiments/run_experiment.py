import json
import logging
import time
from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from signalsim.domain.models import ControlMode, Direction, VehicleCompletedEvent
from signalsim.domain.settings import SimulationSettings
from signalsim.kernel.simulation_kernel import SimulationKernel
from signalsim.logging_setup import setup_logging

log = logging.getLogger(__name__)

class CompletionStats(BaseModel):
    completed: int = 0
    total_wait_ms: float = 0.0
    max_wait_ms: float = 0.0
    per_direction: Dict[Direction, int] = Field(default_factory=lambda: {d: 0 for d in Direction})

    @property
    def mean_wait_ms(self) -> float:
        return self.total_wait_ms / self.completed if self.completed else 0.0

    def record(self, event: VehicleCompletedEvent):
        self.completed += 1
        self.total_wait_ms += event.total_wait_ms
        self.max_wait_ms = max(self.max_wait_ms, event.total_wait_ms)
        self.per_direction[event.origin] += 1

class ExperimentResult(BaseModel):
    mode: ControlMode
    seed: int
    ticks: int
    completed: int
    mean_wait_ms: float
    max_wait_ms: float
    vehicles_remaining: int
    per_direction: Dict[Direction, int]

def run_headless_experiment(mode: ControlMode, ticks: int = 6000, seed: int = 42,
                            settings: Optional[SimulationSettings] = None) -> ExperimentResult:
    base = settings or SimulationSettings()
    kernel = SimulationKernel(settings=base.model_copy(update={"mode": ControlMode(mode)}))
    kernel.initialize(seed=seed)
    stats = CompletionStats()
    kernel.add_completion_listener(stats.record)

    start_time = time.time()
    for _ in range(ticks):
        kernel.run_tick()
    log.info("%s run of %d ticks finished in %.3fs", kernel.signal_system.mode.value,
             ticks, time.time() - start_time)

    return ExperimentResult(
        mode=kernel.signal_system.mode,
        seed=seed,
        ticks=ticks,
        completed=stats.completed,
        mean_wait_ms=stats.mean_wait_ms,
        max_wait_ms=stats.max_wait_ms,
        vehicles_remaining=len(kernel.vehicles),
        per_direction=stats.per_direction,
    )

def compare_modes(ticks: int = 6000, seed: int = 42,
                  settings: Optional[SimulationSettings] = None) -> List[ExperimentResult]:
    return [run_headless_experiment(mode, ticks, seed, settings) for mode in ControlMode]

if __name__ == "__main__":
    import sys
    setup_logging(log_file=None)
    if len(sys.argv) > 1:
        ticks = int(sys.argv[2]) if len(sys.argv) > 2 else 6000
        results = compare_modes(ticks=ticks)
        with open(sys.argv[1], 'w') as f:
            json.dump([r.model_dump(mode="json") for r in results], f, indent=2)
    else:
        print("Usage: python -m signalsim.experiments.run_experiment <output.json> [ticks]")
