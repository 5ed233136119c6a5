from typing import Optional
from pydantic import BaseModel, Field
from signalsim.domain.models import ControlMode
from signalsim.domain import config

class SimulationSettings(BaseModel):
    spawn_rate: float = Field(config.CAR_SPAWN_RATE, ge=0) # vehicles per 10 s, 0 disables spawning
    max_speed: float = Field(config.CAR_SPEED, gt=0)
    green_ms: float = Field(config.GREEN_DURATION, gt=0)
    yellow_ms: float = Field(config.YELLOW_DURATION, gt=0)
    all_red_ms: float = Field(config.ALL_RED_DURATION, gt=0)
    min_green_ms: float = Field(config.MIN_GREEN_TIME, ge=0)
    detector_distance: float = Field(config.DETECTOR_DISTANCE, gt=0)
    mode: ControlMode = ControlMode.FIXED

    # When False only light-induced stops start the wait timer
    count_queue_wait: bool = False

    @property
    def spawn_interval_ms(self) -> Optional[float]:
        if self.spawn_rate <= 0:
            return None
        return 10000.0 / self.spawn_rate

    def merged(self, update: "SettingsUpdate") -> "SimulationSettings":
        data = self.model_dump()
        data.update(update.model_dump(exclude_none=True))
        # model_copy(update=...) would skip validation
        return SimulationSettings(**data)

class SettingsUpdate(BaseModel):
    spawn_rate: Optional[float] = None
    max_speed: Optional[float] = None
    green_ms: Optional[float] = None
    yellow_ms: Optional[float] = None
    all_red_ms: Optional[float] = None
    min_green_ms: Optional[float] = None
    detector_distance: Optional[float] = None
    count_queue_wait: Optional[bool] = None
