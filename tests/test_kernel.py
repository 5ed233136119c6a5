import unittest
from signalsim.application.commands import (
    PauseCommand, ResetCommand, ResumeCommand, SetControlModeCommand, SpawnVehicleCommand,
    UpdateSettingsCommand
)
from signalsim.domain.models import ControlMode, Direction, LightState, TurnType, VehicleState
from signalsim.domain.settings import SettingsUpdate, SimulationSettings
from signalsim.kernel.simulation_kernel import SimulationKernel

class KernelTestCase(unittest.TestCase):
    mode = ControlMode.FIXED

    def setUp(self):
        self.kernel = SimulationKernel(settings=SimulationSettings(spawn_rate=0, mode=self.mode))
        self.kernel.initialize(seed=1)

    def run_ticks(self, n):
        for _ in range(n):
            self.kernel.run_tick()

class TestTickLoop(KernelTestCase):
    def test_time_advances_in_milliseconds(self):
        self.run_ticks(3)
        self.assertEqual(self.kernel.state.tick_id, 3)
        self.assertEqual(self.kernel.state.time_ms, 150.0)

    def test_negative_dt_rejected(self):
        with self.assertRaises(ValueError):
            self.kernel.run_tick(-0.05)
        self.assertEqual(self.kernel.state.tick_id, 0)

    def test_zero_dt_keeps_clock(self):
        self.kernel.run_tick(0.0)
        self.assertEqual(self.kernel.state.time_ms, 0.0)
        self.assertEqual(self.kernel.state.tick_id, 1)

    def test_fixed_mode_leaves_sensors_empty(self):
        self.kernel.vehicle_manager.try_spawn(Direction.EAST).x = 495.0
        self.run_ticks(20)
        for reading in self.kernel.sensor_snapshot().values():
            self.assertEqual(reading.cars_waiting, 0)

    def test_spawning_follows_rate(self):
        self.kernel.apply_settings(SimulationSettings(spawn_rate=5))
        self.run_ticks(40)
        self.assertEqual(len(self.kernel.vehicles), 1)

    def test_vehicles_returns_copy(self):
        self.kernel.vehicle_manager.try_spawn(Direction.NORTH)
        self.kernel.vehicles.clear()
        self.assertEqual(len(self.kernel.vehicles), 1)

class TestCommands(KernelTestCase):
    def test_pause_and_resume(self):
        self.kernel.queue_command(PauseCommand())
        self.assertFalse(self.kernel.run_tick())
        self.assertFalse(self.kernel.run_tick())
        self.assertEqual(self.kernel.state.tick_id, 0)
        self.assertTrue(self.kernel.get_state().paused)

        self.kernel.queue_command(ResumeCommand())
        self.assertTrue(self.kernel.run_tick())
        self.assertEqual(self.kernel.state.tick_id, 1)

    def test_mode_command(self):
        self.run_ticks(10)
        self.kernel.queue_command(SetControlModeCommand(ControlMode.ADAPTIVE))
        self.kernel.run_tick()
        self.assertEqual(self.kernel.signal_system.mode, ControlMode.ADAPTIVE)
        self.assertEqual(self.kernel.state.settings.mode, ControlMode.ADAPTIVE)
        self.assertEqual(self.kernel.light_states()[Direction.NORTH], LightState.GREEN)
        self.assertEqual(self.kernel.get_state().phase, "NS-GREEN")

    def test_settings_command_applies_on_next_tick(self):
        self.kernel.queue_command(UpdateSettingsCommand(SettingsUpdate(green_ms=1000, max_speed=30)))
        self.assertEqual(self.kernel.state.settings.green_ms, 10000)
        self.run_ticks(20)
        self.assertEqual(self.kernel.state.settings.green_ms, 1000)
        self.assertEqual(self.kernel.vehicle_manager.settings.max_speed, 30)
        self.assertEqual(self.kernel.signal_system.phase_name, "NS-YELLOW")

    def test_reset_command(self):
        self.kernel.vehicle_manager.try_spawn(Direction.SOUTH)
        self.run_ticks(250)
        self.kernel.queue_command(ResetCommand())
        self.kernel.run_tick()
        # The reset runs before the tick advances the clock
        self.assertEqual(self.kernel.state.tick_id, 1)
        self.assertEqual(self.kernel.vehicles, [])
        self.assertEqual(self.kernel.signal_system.phase_name, "NS-GREEN")

    def test_command_queued_during_tick_waits_for_next(self):
        class QueuePause(PauseCommand):
            def execute(self, kernel):
                kernel.queue_command(PauseCommand())

        self.kernel.queue_command(QueuePause())
        self.assertTrue(self.kernel.run_tick())
        self.assertEqual(len(self.kernel.command_queue), 1)
        self.assertFalse(self.kernel.run_tick())

    def test_spawn_command(self):
        self.kernel.queue_command(SpawnVehicleCommand(Direction.WEST, TurnType.RIGHT))
        self.kernel.queue_command(SpawnVehicleCommand(Direction.WEST, TurnType.LEFT))
        self.kernel.run_tick()
        self.assertEqual(len(self.kernel.vehicles), 1)
        self.assertEqual(self.kernel.vehicles[0].turn, TurnType.RIGHT)

class TestCompletion(KernelTestCase):
    def test_listener_receives_completed_vehicles(self):
        events = []
        self.kernel.add_completion_listener(events.append)
        self.kernel.vehicle_manager.try_spawn(Direction.NORTH, TurnType.STRAIGHT)
        self.run_ticks(600)
        self.assertEqual(len(events), 1)
        self.assertEqual(events[0].origin, Direction.NORTH)
        self.assertEqual(self.kernel.vehicles, [])

class TestAdaptive(KernelTestCase):
    mode = ControlMode.ADAPTIVE

    def test_waiting_demand_takes_green_after_min_green(self):
        v = self.kernel.vehicle_manager.try_spawn(Direction.EAST, TurnType.STRAIGHT)
        v.x = 495.0
        self.run_ticks(99)
        self.assertEqual(v.state, VehicleState.WAITING)
        self.assertEqual(self.kernel.light_states()[Direction.EAST], LightState.RED)
        self.assertEqual(self.kernel.sensor_snapshot()[Direction.EAST].cars_waiting, 1)

        self.kernel.run_tick()
        lights = self.kernel.light_states()
        self.assertEqual(lights[Direction.EAST], LightState.GREEN)
        self.assertEqual(lights[Direction.WEST], LightState.GREEN)
        self.assertEqual(lights[Direction.NORTH], LightState.RED)
        self.assertEqual(v.state, VehicleState.CROSSING)

    def test_no_demand_holds_green(self):
        self.run_ticks(400)
        self.assertEqual(self.kernel.signal_system.phase_name, "NS-GREEN")

    def test_snapshot_reports_sensors(self):
        v = self.kernel.vehicle_manager.try_spawn(Direction.EAST, TurnType.STRAIGHT)
        v.x = 495.0
        self.run_ticks(21)
        snapshot = self.kernel.get_state()
        self.assertEqual(snapshot.mode, ControlMode.ADAPTIVE)
        self.assertEqual(snapshot.sensors[Direction.EAST].detected, [v.id])
        self.assertEqual(snapshot.sensors[Direction.EAST].wait_time_ms, 1000.0)
        self.assertEqual(snapshot.vehicles[0].waitMs, 1000.0)

if __name__ == '__main__':
    unittest.main()
