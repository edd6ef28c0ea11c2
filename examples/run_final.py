# -*- coding: utf-8 -*-
import os
import sys

import matplotlib.pyplot as plt
import numpy as np

# Ajout du chemin src
root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src'))
if root not in sys.path: sys.path.insert(0, root)

from track_pid import PidController
from track_pid.models.robot import Robot

KP, KI, KD = 0.1, 1e-4, 4.0


def main():
    print("🧪 STABILISATION : ligne droite, départ décalé de 1 m")

    controller = PidController(KP, KI, KD, off_track_cte=5.0)
    robot = Robot(length=20.0, steering_drift=np.deg2rad(2.0))
    robot.set(0.0, 1.0, 0.0)

    xs, ys, steer = [], [], []

    def on_control(steering, throttle):
        robot.move(steering * np.pi / 4.0, 1.0)
        steer.append(steering)

    def on_reset():
        robot.set(0.0, 1.0, 0.0)

    for _ in range(300):
        controller.update(robot.y, 60.0, on_control, on_reset)
        xs.append(robot.x)
        ys.append(robot.y)

    print(f"CTE final = {ys[-1]:.4f} m")

    plt.figure(figsize=(10, 6))
    plt.subplot(2, 1, 1)
    plt.plot(xs, ys, 'b-', label="Robot")
    plt.axhline(0.0, color='g', label="Consigne")
    plt.ylabel("y (m)")
    plt.legend()
    plt.grid(True)

    plt.subplot(2, 1, 2)
    plt.plot(steer, 'r-')
    plt.ylabel("Braquage [-1, 1]")
    plt.xlabel("Trame")
    plt.grid(True)

    plt.tight_layout()
    plt.show()


if __name__ == "__main__":
    main()
