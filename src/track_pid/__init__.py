# src/track_pid/__init__.py

__version__ = "1.0.0"

# Permet de faire : from track_pid import PidController
from .pid_controller import PidController

# Permet de faire : from track_pid import ControllerSettings, settings_from_env
from .config import ControllerSettings, PidConfig, TwiddleConfig, TrackingConfig, settings_from_env
