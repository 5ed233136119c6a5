import asyncio
import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Dict
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from signalsim.application.commands import (
    PauseCommand, ResetCommand, ResumeCommand, SetControlModeCommand, UpdateSettingsCommand
)
from signalsim.domain.models import (
    CurvePoint, Direction, LightState, ModeUpdate, SensorReading, SimulationSnapshot,
    TurnPathView, TurnType, destination_for
)
from signalsim.domain.settings import SettingsUpdate, SimulationSettings
from signalsim.geometry.turn_paths import sample_points, turn_path_for
from signalsim.kernel.simulation_kernel import SimulationKernel
from signalsim.logging_setup import setup_logging

log = logging.getLogger(__name__)

# Initialize Kernel
kernel = SimulationKernel()

# Background task for simulation loop
@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(
        getattr(logging, os.environ.get("SIGNALSIM_LOG_LEVEL", "INFO").upper(), logging.INFO),
        os.environ.get("SIGNALSIM_LOG_FILE", "signalsim.log") or None,
    )
    kernel.initialize(int(os.environ.get("SIGNALSIM_SEED", "42")))
    loop_task = asyncio.create_task(run_simulation())
    log.info("Tick loop started")
    yield
    loop_task.cancel()

app = FastAPI(lifespan=lifespan)

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

async def run_simulation():
    """Runs the simulation update loop at ~20Hz"""
    target_fps = 20
    dt = 1.0 / target_fps

    while True:
        start_time = time.time()

        # Paused kernels consume commands but do not advance
        kernel.run_tick(dt)

        elapsed = time.time() - start_time
        await asyncio.sleep(max(0.0, dt - elapsed))

@app.get("/api/state", response_model=SimulationSnapshot)
async def get_state():
    """Returns lights, vehicles and detector readings for a renderer"""
    return kernel.get_state()

@app.get("/api/lights", response_model=Dict[Direction, LightState])
async def get_lights():
    return kernel.light_states()

@app.get("/api/sensors", response_model=Dict[Direction, SensorReading])
async def get_sensors():
    return kernel.sensor_snapshot()

@app.get("/api/settings", response_model=SimulationSettings)
async def get_settings():
    return kernel.state.settings

@app.post("/api/settings", response_model=SimulationSettings)
async def update_settings(updates: SettingsUpdate):
    """Validates the merged settings now, applies them on the next tick"""
    try:
        merged = kernel.state.settings.merged(updates)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    kernel.queue_command(UpdateSettingsCommand(updates))
    return merged

@app.post("/api/mode")
async def set_mode(update: ModeUpdate):
    kernel.queue_command(SetControlModeCommand(update.mode))
    return {"status": "Mode Updated", "mode": update.mode}

@app.post("/api/reset")
async def reset():
    kernel.queue_command(ResetCommand())
    return {"status": "Reset queued"}

@app.post("/api/pause")
async def pause():
    kernel.queue_command(PauseCommand())
    return {"status": "Paused"}

@app.post("/api/resume")
async def resume():
    kernel.queue_command(ResumeCommand())
    return {"status": "Resumed"}

@app.get("/api/turn-paths/{direction}/{turn}", response_model=TurnPathView)
async def get_turn_path(direction: str, turn: str, samples: int = 11):
    """Samples the turn curve for an approach, for drawing turn guides"""
    try:
        origin = Direction(direction.upper())
        turn_type = TurnType(turn.upper())
    except ValueError:
        raise HTTPException(status_code=404, detail="Unknown direction or turn")
    if samples < 2:
        raise HTTPException(status_code=422, detail="samples must be at least 2")
    curve = turn_path_for(kernel.geometry, origin, turn_type)
    return TurnPathView(
        origin=origin,
        turn=turn_type,
        destination=destination_for(origin, turn_type),
        points=[CurvePoint(x=s.x, y=s.y, heading=s.heading) for s in sample_points(curve, samples)],
    )

@app.get("/")
def read_root():
    return {"status": "Signal simulation running", "mode": kernel.signal_system.mode}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("SIGNALSIM_PORT", "8000")))
