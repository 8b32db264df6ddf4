import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from glideratio.core.models import INVALID_GR
from glideratio.polar.polar import PolarInfo


class GlideVisualizer:
    def __init__(self, figsize=(12, 8)):
        self.figsize = figsize
        self.colors = {
            "polar": "#3498db",
            "points": "#e74c3c",
            "tangent": "#95a5a6",
            "altitude": "#2ecc71",
            "gr_average": "#3498db",
            "gr_instant": "#f1c40f",
        }

    def _finish(self, save_path):
        plt.tight_layout()
        if save_path:
            plt.savefig(save_path)
            plt.close()
        else:
            plt.show()

    def plot_polar(self, polar: PolarInfo, save_path=None):
        """Plot the fitted polar with its calibration points and best glide tangent."""
        coefficients = polar.calculate_coefficients()
        if not coefficients.is_valid():
            raise ValueError(f"Cannot plot invalid polar {polar.name!r}")

        speeds = np.array([p[0] for p in polar.points])
        sinks = np.array([p[1] for p in polar.points])
        v = np.linspace(max(speeds.min() * 0.8, 1.0), speeds.max() * 1.2, 200)

        fig, ax = plt.subplots(figsize=self.figsize)
        ax.plot(
            v * 3.6,
            coefficients.sink_rate(v),
            color=self.colors["polar"],
            label="Fitted polar",
        )
        ax.scatter(
            speeds * 3.6,
            sinks,
            color=self.colors["points"],
            zorder=3,
            label="Calibration points",
        )

        best_v = coefficients.best_glide_speed
        if np.isfinite(best_v):
            slope = coefficients.sink_rate(best_v) / best_v
            ax.plot(
                [0, v.max() * 3.6],
                [0, slope * v.max()],
                "--",
                color=self.colors["tangent"],
                label=f"Best glide {coefficients.best_glide_ratio:.1f}",
            )

        ax.set_xlim(left=0)
        ax.set_ylim(bottom=0)
        ax.invert_yaxis()
        ax.set_xlabel("Airspeed (km/h)")
        ax.set_ylabel("Sink rate (m/s)")
        ax.set_title(f"Polar {polar.name}".strip())
        ax.grid(True)
        ax.legend()

        self._finish(save_path)

    def plot_glide_ratio(self, df: pd.DataFrame, save_path=None):
        """Plot altitude and glide ratios of a replayed flight."""
        if df.empty:
            raise ValueError("Cannot plot a flight without fixes")

        fig, (ax1, ax2) = plt.subplots(2, 1, figsize=self.figsize, sharex=True)

        ax1.plot(df["timestamp"], df["altitude"], color=self.colors["altitude"])
        ax1.set_ylabel("Altitude (m)")
        ax1.set_title("Altitude over Time")
        ax1.grid(True)

        # Unavailable and invalid ratios are left out
        for column in ("gr_average", "gr_instant"):
            values = df[column].where((df[column] != 0) & (df[column] != INVALID_GR))
            sns.lineplot(
                x=df["timestamp"],
                y=values,
                ax=ax2,
                color=self.colors[column],
                label=column,
            )
        ax2.set_ylabel("Glide ratio")
        ax2.set_title("Glide Ratio")
        ax2.grid(True)

        plt.xlabel("Time")
        self._finish(save_path)
