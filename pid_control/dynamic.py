from __future__ import annotations
import logging
from dataclasses import dataclass
import numpy as np
import matplotlib.pyplot as plt

logger = logging.getLogger(__name__)

AMBIENT_TEMPERATURE = 70.0
TARGET_TEMPERATURE = 350.0
MAX_HEATER_POWER = 20.0
TEMPERATURE_LOSS_PER_SECOND = 0.01


class Oven:
    """Deliberately simple first-order thermal plant.

    Heating raises the temperature linearly with applied power; cooling is
    proportional to the difference from ambient.
    """
    def __init__(self):

        self.ambient_temperature = AMBIENT_TEMPERATURE
        self.max_heat_rate = MAX_HEATER_POWER
        self.loss_per_second = TEMPERATURE_LOSS_PER_SECOND

        self.dt = 1 # Time step for discrete time simulation

        self.temperature = self.ambient_temperature

    def transition(self, power: float, disturbance: float):
        power_ratio = power / self.max_heat_rate
        if power_ratio > 0:
            self.temperature += self.max_heat_rate * power_ratio * self.dt

        excess = self.temperature - self.ambient_temperature
        if excess > 0:
            self.temperature -= self.loss_per_second * excess * self.dt

        self.temperature += disturbance

    def get_temperature(self) -> float:
        return self.temperature

    def reset_state(self):
        self.temperature = self.ambient_temperature


class OnOffController:
    """Thermostat with a deadband: full power below target - deadband, off otherwise."""
    def __init__(self, max_power: float = MAX_HEATER_POWER, deadband: float = 5.0):
        self.max_power = max_power
        self.deadband = deadband

    def update(self, target: float, current: float, delta) -> float:
        if current < target - self.deadband:
            return self.max_power
        return 0.0


@dataclass
class Trajectory:
    time: np.ndarray
    reference: np.ndarray
    measurement: np.ndarray
    control: np.ndarray

    def settling_error(self) -> float:
        """Mean absolute tracking error over the last 10% of samples."""
        tail = max(1, len(self.time) // 10)
        return float(np.mean(np.abs(self.reference[-tail:] - self.measurement[-tail:])))

    def plot(self):
        fig, (ax_temp, ax_power) = plt.subplots(2, 1, sharex=True)
        ax_temp.plot(self.time, self.measurement, label='Measurement')
        ax_temp.plot(self.time, self.reference, 'r', linestyle='--', label='Reference')
        ax_temp.legend(loc='lower right')
        ax_power.plot(self.time, self.control, 'g', label='Control signal')
        ax_power.legend(loc='upper right')
        plt.show()


def door_opening(duration: int, step: int = 43, drop: float = -60.0) -> np.ndarray:
    """Disturbances with a single sudden temperature drop, like opening the oven door."""
    disturbances = np.zeros(duration)
    if 0 <= step < duration:
        disturbances[step] = drop
    return disturbances


class ClosedLoop:
    def __init__(self, plant: Oven, controller):
        self.plant = plant
        self.controller = controller

    def simulate(self, reference: np.ndarray, disturbances: np.ndarray) -> Trajectory:

        T = len(reference)
        if len(disturbances) < T:
            raise ValueError("Disturbances must be at least as long as the reference")

        dt = getattr(self.plant, "dt", 1.0)
        measurements = np.zeros(T)
        actions = np.zeros(T)
        self.plant.reset_state()
        if hasattr(self.controller, "reset"):
            self.controller.reset()

        for t in range(T):
            measurements[t] = self.plant.get_temperature()
            actions[t] = self.controller.update(reference[t], measurements[t], dt)
            self.plant.transition(actions[t], disturbances[t])

            if t % 10 == 0:
                logger.info("t=%d measurement=%5.1f target=%5.1f control=%4.2f",
                            t, measurements[t], reference[t], actions[t])

        return Trajectory(np.arange(T) * dt, np.asarray(reference, dtype=float), measurements, actions)
