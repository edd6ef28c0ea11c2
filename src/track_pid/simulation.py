from __future__ import annotations

from typing import Optional

import numpy as np

from track_pid.config import SimulationConfig
from track_pid.models.robot import Robot
from track_pid.models.track import Track
from track_pid.pid_controller import PidController


class TrackSimulation:
    """
    Offline bench: a Robot driving a Track, controlled by a PidController.
    Plays the simulator's part: sends (cte, speed) every frame, applies
    (steering, throttle), and restarts from the track origin on reset.
    Speeds are in mph like the telemetry of the real simulator.
    """

    def __init__(self, controller: PidController, track: Track,
                 sim_cfg: Optional[SimulationConfig] = None):
        self.controller = controller
        self.track = track
        self.sim_cfg = sim_cfg if sim_cfg is not None else SimulationConfig()
        self.robot = Robot(length=self.sim_cfg.robot_length)

        self.speed = 0.0
        self.trial = 0
        self.resets = 0
        self.restart()

        self.history = {
            "frame": [],
            "trial": [],
            "x": [],
            "y": [],
            "cte": [],
            "speed": [],
            "steering": [],
            "throttle": [],
        }

    def restart(self) -> None:
        self.robot.set(*self.track.start_pose())
        self.speed = self.sim_cfg.start_speed

    def run(self, max_frames: int, stop_on_final: bool = False):
        """
        Runs up to `max_frames` frames and returns the history dict.
        With stop_on_final, stops one lap after the final coefficients are adopted.
        """
        tracking = self.controller.tracking
        dt = tracking.seconds_per_frame
        # Un tour à vitesse max
        lap_step = max(self.sim_cfg.max_speed * tracking.speed_to_distance, 1e-9)
        final_frames = int(np.ceil(self.track.length / lap_step))
        frames_since_final = 0

        for frame in range(max_frames):
            cte = self.track.cte(self.robot.x, self.robot.y)
            speed = self.speed
            cmd = {}

            def on_control(steering, throttle):
                cmd["steering"] = steering
                cmd["throttle"] = throttle

            def on_reset():
                cmd["reset"] = True

            self.controller.update(cte, speed, on_control, on_reset)

            if cmd.get("reset"):
                self.resets += 1
                self.trial += 1
                self.restart()
                continue

            steering, throttle = cmd["steering"], cmd["throttle"]
            self.robot.move(steering * self.sim_cfg.max_steering_angle,
                            speed * tracking.speed_to_distance,
                            max_steering_angle=self.sim_cfg.max_steering_angle)
            self.speed = float(np.clip(
                speed + (throttle * self.sim_cfg.acceleration - self.sim_cfg.drag) * dt,
                0.0, self.sim_cfg.max_speed))

            self.history["frame"].append(frame)
            self.history["trial"].append(self.trial)
            self.history["x"].append(self.robot.x)
            self.history["y"].append(self.robot.y)
            self.history["cte"].append(cte)
            self.history["speed"].append(speed)
            self.history["steering"].append(steering)
            self.history["throttle"].append(throttle)

            if stop_on_final and self.controller.has_final_coefficients:
                frames_since_final += 1
                if frames_since_final >= final_frames:
                    break

        return self.history
