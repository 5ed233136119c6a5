import unittest
from fastapi.testclient import TestClient
from signalsim import main
from signalsim.domain.models import ControlMode
from signalsim.domain.settings import SimulationSettings

class TestApi(unittest.TestCase):
    # No context manager: the lifespan loop stays off and ticks are driven by hand
    def setUp(self):
        self.kernel = main.kernel
        self.kernel.command_queue.clear()
        self.kernel.state.paused = False
        self.kernel.apply_settings(SimulationSettings(spawn_rate=0))
        self.kernel.initialize(seed=5)
        self.client = TestClient(main.app)

    def test_root(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["mode"], "FIXED")

    def test_state(self):
        self.kernel.run_tick()
        data = self.client.get("/api/state").json()
        self.assertEqual(data["tick"], 1)
        self.assertEqual(data["timeMs"], 50.0)
        self.assertEqual(data["phase"], "NS-GREEN")
        self.assertEqual(data["lights"]["NORTH"], "GREEN")
        self.assertEqual(data["lights"]["EAST"], "RED")
        self.assertEqual(data["vehicleCount"], 0)
        self.assertEqual(set(data["sensors"]), {"NORTH", "EAST", "SOUTH", "WEST"})

    def test_lights_and_sensors(self):
        self.assertEqual(self.client.get("/api/lights").json()["SOUTH"], "GREEN")
        sensors = self.client.get("/api/sensors").json()
        self.assertEqual(sensors["WEST"]["cars_waiting"], 0)

    def test_settings_roundtrip(self):
        response = self.client.post("/api/settings", json={"green_ms": 6000})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["green_ms"], 6000)
        # Applied on the next tick
        self.assertEqual(self.client.get("/api/settings").json()["green_ms"], 10000)
        self.kernel.run_tick()
        self.assertEqual(self.client.get("/api/settings").json()["green_ms"], 6000)

    def test_invalid_settings_rejected(self):
        response = self.client.post("/api/settings", json={"max_speed": -1})
        self.assertEqual(response.status_code, 422)
        self.assertEqual(len(self.kernel.command_queue), 0)

    def test_mode_switch(self):
        response = self.client.post("/api/mode", json={"mode": "ADAPTIVE"})
        self.assertEqual(response.status_code, 200)
        self.kernel.run_tick()
        self.assertEqual(self.client.get("/api/state").json()["mode"], "ADAPTIVE")
        self.kernel.set_mode(ControlMode.FIXED)

    def test_unknown_mode_rejected(self):
        response = self.client.post("/api/mode", json={"mode": "MANUAL"})
        self.assertEqual(response.status_code, 422)

    def test_pause_resume_reset(self):
        self.client.post("/api/pause")
        self.assertFalse(self.kernel.run_tick())
        self.assertTrue(self.client.get("/api/state").json()["paused"])
        self.client.post("/api/resume")
        self.client.post("/api/reset")
        self.assertTrue(self.kernel.run_tick())
        self.assertEqual(self.kernel.state.tick_id, 1)

    def test_turn_path(self):
        response = self.client.get("/api/turn-paths/north/right", params={"samples": 3})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["destination"], "EAST")
        self.assertEqual(len(data["points"]), 3)
        self.assertEqual((data["points"][0]["x"], data["points"][0]["y"]), (370.0, 340.0))
        self.assertEqual((data["points"][-1]["x"], data["points"][-1]["y"]), (460.0, 430.0))

    def test_turn_path_errors(self):
        self.assertEqual(self.client.get("/api/turn-paths/up/left").status_code, 404)
        self.assertEqual(self.client.get("/api/turn-paths/north/u-turn").status_code, 404)
        response = self.client.get("/api/turn-paths/north/left", params={"samples": 1})
        self.assertEqual(response.status_code, 422)

if __name__ == '__main__':
    unittest.main()
