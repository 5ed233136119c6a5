from signalsim.domain.models import SimulationSnapshot, VehicleView

class SnapshotBuilder:
    def build(self, kernel) -> SimulationSnapshot:
        state = kernel.state
        vehicles = kernel.vehicle_manager.vehicles
        return SimulationSnapshot(
            tick=state.tick_id,
            timeMs=state.time_ms,
            mode=kernel.signal_system.mode,
            phase=kernel.signal_system.phase_name,
            paused=state.paused,
            lights=kernel.signal_system.light_states(),
            vehicles=[
                VehicleView(
                    id=v.id,
                    origin=v.origin,
                    destination=v.destination,
                    turn=v.turn,
                    state=v.state,
                    x=v.x,
                    y=v.y,
                    heading=v.heading,
                    speed=v.speed,
                    waitMs=v.total_wait_ms,
                )
                for v in vehicles
            ],
            vehicleCount=len(vehicles),
            sensors={d: r.model_copy(deep=True) for d, r in state.sensors.items()},
        )
