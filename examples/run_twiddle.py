# -*- coding: utf-8 -*-
"""
RECHERCHE TWIDDLE SUR PISTE OVALE
---------------------------------
1. Construit une piste fermée (ovale) et le banc de simulation.
2. Lance le PidController en mode recherche (coefficients initiaux + deltas).
3. Affiche la trajectoire, le CTE par essai et l'évolution des gains.
"""
import os
import sys

import matplotlib.pyplot as plt
import numpy as np

# Ajout du chemin src
root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src'))
if root not in sys.path: sys.path.insert(0, root)

from track_pid import PidController, settings_from_env
from track_pid.config import ControllerSettings, PidConfig, SimulationConfig, TwiddleConfig
from track_pid.models.track import Track
from track_pid.simulation import TrackSimulation


def oval_waypoints(straight=120.0, radius=40.0, n_arc=24, n_straight=12):
    # Sens anti-horaire, départ au milieu de la ligne droite du bas
    half = straight / 2
    bottom = np.column_stack([np.linspace(0.0, half, n_straight, endpoint=False), np.full(n_straight, -radius)])
    a = np.linspace(-np.pi / 2, np.pi / 2, n_arc, endpoint=False)
    right = np.column_stack([half + radius * np.cos(a), radius * np.sin(a)])
    top = np.column_stack([np.linspace(half, -half, 2 * n_straight, endpoint=False), np.full(2 * n_straight, radius)])
    left = np.column_stack([-half - radius * np.cos(a), -radius * np.sin(a)])
    back = np.column_stack([np.linspace(-half, 0.0, n_straight, endpoint=False), np.full(n_straight, -radius)])
    return np.vstack([bottom, right, top, left, back])


def main():
    track = Track(oval_waypoints(), closed=True)
    print(f"--- 📂 Piste ovale : {track.length:.1f} m ---")

    settings = settings_from_env()
    if settings.twiddle is None:
        # Gains de départ volontairement faibles et tolérance serrée : la recherche doit retoucher les gains
        settings = ControllerSettings(
            pid=PidConfig(kp=0.05, ki=1e-5, kd=1.0, off_track_cte=2.0),
            twiddle=TwiddleConfig(dkp=0.02, dki=1e-5, dkd=0.5, track_length=track.length),
        )

    controller = PidController.from_settings(settings)
    sim_cfg = SimulationConfig(max_speed=60.0)
    sim = TrackSimulation(controller, track, sim_cfg)

    print("🚀 Simulation ...")
    history = sim.run(max_frames=60000, stop_on_final=True)

    if controller.has_final_coefficients:
        kp, ki, kd = controller.coefficients
        print(f"✅ Coefficients finaux : Kp={kp:.4f}, Ki={ki:.6f}, Kd={kd:.4f} ({sim.resets} resets)")
    else:
        print(f"❌ Pas de coefficients finaux après {sim.resets} essais.")

    out_csv = os.path.join(os.path.dirname(__file__), "output", "twiddle_trials.csv")
    controller.trials.to_csv(out_csv)
    print(f"Essais enregistrés : {out_csv}")

    df = controller.trials.to_dataframe()

    # ==========================================
    #               AFFICHAGE
    # ==========================================
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(13, 6))
    centre = track.centerline()
    ax1.plot(centre[:, 0], centre[:, 1], 'k--', label="Ligne centrale")
    trial = np.asarray(history["trial"])
    last = trial == trial.max() if len(trial) else trial
    ax1.plot(np.asarray(history["x"])[last], np.asarray(history["y"])[last], 'r-', label="Dernier essai")
    ax1.set_aspect("equal")
    ax1.set_title("Trajectoire")
    ax1.legend()
    ax1.grid(True)

    ax2.plot(history["cte"], linewidth=0.8)
    ax2.set_title("CTE (toutes trames)")
    ax2.set_xlabel("Trame")
    ax2.set_ylabel("CTE (m)")
    ax2.grid(True)

    if not df.empty:
        fig2, axes = plt.subplots(3, 1, figsize=(10, 8), sharex=True)
        for ax, col in zip(axes, ("kp", "ki", "kd")):
            ax.plot(df["trial"], df[col], 'o-')
            ax.set_ylabel(col)
            ax.grid(True)
        axes[-1].set_xlabel("Essai")
        fig2.suptitle("Évolution des gains (Twiddle)")

    plt.tight_layout()
    plt.show()


if __name__ == "__main__":
    main()
