# src/time_warp/scheduler/curves.py

"""
Raw interval curves.

Each evaluator maps (elapsed, duration, amplitude, scale) to a raw interval
in milliseconds. Clamping to the engine floor and the distortion factor are
applied by the engine, not here.
"""

from __future__ import annotations

import math
from collections.abc import Callable

from .models import CurveKind

CurveFn = Callable[[float, float, float, float], float]


def linear(elapsed: float, duration: float, amplitude: float, scale: float) -> float:
    return amplitude * scale


def sinusoidal(elapsed: float, duration: float, amplitude: float, scale: float) -> float:
    # The 0.5 base keeps troughs at half amplitude instead of zero.
    return amplitude * (0.5 + 0.5 * abs(math.sin(math.pi * elapsed / duration))) * scale


def exponential(elapsed: float, duration: float, amplitude: float, scale: float) -> float:
    # exp overflows for large negative elapsed (clock stepping backwards).
    return amplitude * math.exp(-max(elapsed, 0.0) / duration) * scale


def logarithmic(elapsed: float, duration: float, amplitude: float, scale: float) -> float:
    # log1p is undefined below -1.
    return amplitude * math.log1p(max(elapsed, 0.0) / duration) * scale


BUILTIN_CURVES: dict[CurveKind, CurveFn] = {
    CurveKind.LINEAR: linear,
    CurveKind.SINUSOIDAL: sinusoidal,
    CurveKind.EXPONENTIAL: exponential,
    CurveKind.LOGARITHMIC: logarithmic,
}


def clamp_interval(raw: float, *, distortion: float, floor: float) -> float:
    """Apply distortion and the floor. NaN resolves to the floor."""
    value = float(raw) * distortion
    if math.isnan(value):
        return floor
    return max(floor, value)
