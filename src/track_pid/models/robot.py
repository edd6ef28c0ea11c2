import numpy as np


class Robot:
    """
    Kinematic bicycle model.
    Logique : (Angle de braquage, Distance) -> Pose (x, y, orientation).
    """
    def __init__(self, length: float = 20.0, steering_drift: float = 0.0):
        self.length = length
        self.steering_drift = steering_drift

        # Pose initiale
        self.x = 0.0
        self.y = 0.0
        self.orientation = 0.0

    def set(self, x: float, y: float, orientation: float) -> None:
        self.x = float(x)
        self.y = float(y)
        self.orientation = float(orientation) % (2.0 * np.pi)

    def get(self):
        return self.x, self.y, self.orientation

    def move(self, steering: float, distance: float,
             tolerance: float = 0.001, max_steering_angle: float = np.pi / 4.0):
        """
        Moves the robot along an arc.

        Args:
            steering (float): Front wheel angle (rad), clipped to max_steering_angle.
            distance (float): Distance travelled by the rear axle, >= 0.
        """
        steering = float(np.clip(steering, -max_steering_angle, max_steering_angle))
        steering += self.steering_drift
        distance = max(0.0, distance)

        turn = np.tan(steering) * distance / self.length

        if abs(turn) < tolerance:
            # Ligne droite (approximation)
            self.x += distance * np.cos(self.orientation)
            self.y += distance * np.sin(self.orientation)
            self.orientation = (self.orientation + turn) % (2.0 * np.pi)
        else:
            radius = distance / turn
            cx = self.x - np.sin(self.orientation) * radius
            cy = self.y + np.cos(self.orientation) * radius
            self.orientation = (self.orientation + turn) % (2.0 * np.pi)
            self.x = cx + np.sin(self.orientation) * radius
            self.y = cy - np.cos(self.orientation) * radius

        return self.x, self.y, self.orientation
