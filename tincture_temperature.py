# -*- coding: utf-8 -*-
"""
Tincture: Dynamic color for themed interfaces
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tincture_temperature.py - Warm/cool relationships between colors
of equal chroma and tone: complements and analogous sets.

The temperature scale is Ou, Woodcock & Wright's warm-cool factor on the
Lab hue circle. Everything else is relative: a color's temperature is
normalised against the coldest and warmest colors reachable at the same
chroma and tone.

References:
    - Ou, L.-C., Woodcock, A., Wright, A. (2004). "A study of colour
      emotion and colour preference." Color Research & Application 29(3).
    - Albers, J. "Interaction of Color", chapters XIX and XXI.
"""

from __future__ import annotations

import math
import threading
from typing import Final, List, Optional

import numpy as np

from tincture_colorengine import HctColor, RAD2DEG, DEG2RAD, sanitize_degrees

__all__ = [
    "TemperatureCache",
]

_HUE_SAMPLES: Final[int] = 361


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _is_between(angle: float, a: float, b: float) -> bool:
    """True if ``angle`` lies on the clockwise arc from ``a`` to ``b``."""
    if a < b:
        return a <= angle <= b
    return a <= angle or angle <= b


class TemperatureCache:
    """
    Temperature relations for one input color.

    Every color produced keeps the input's chroma and tone (chroma capped
    where a hue cannot hold it). The 361-sample hue table and everything
    derived from it are computed on first use and kept for the lifetime
    of the instance.

    Parameters
    ----------
    input_color : HctColor
        Color to find complement / analogous colors of.
    """

    def __init__(self, input_color: HctColor) -> None:
        self._input = input_color
        self._lock = threading.RLock()

        self._hcts_by_hue: Optional[List[HctColor]] = None
        self._temps_by_hue: Optional[np.ndarray] = None
        self._coldest: Optional[HctColor] = None
        self._warmest: Optional[HctColor] = None
        self._coldest_temp: float = 0.0
        self._warmest_temp: float = 0.0
        self._complement: Optional[HctColor] = None

    @property
    def input(self) -> HctColor:
        return self._input

    # -- raw temperature ---------------------------------------------------
    @staticmethod
    def raw_temperature(color: HctColor) -> float:
        """
        Warm-cool factor of a color. Below 0 is cool, above 0 warm.

        Bounded by roughly -9.66 and 8.61 for Lab chroma up to 130.
        """
        _, a, b = color.to_lab()
        hue = sanitize_degrees(math.atan2(b, a) * RAD2DEG)
        chroma = math.hypot(a, b)
        return -0.5 + 0.02 * chroma ** 1.07 * math.cos(
            sanitize_degrees(hue - 50.0) * DEG2RAD)

    # -- lazy tables -------------------------------------------------------
    def _ensure_tables(self) -> None:
        with self._lock:
            if self._hcts_by_hue is not None:
                return

            hcts = HctColor.batch(np.arange(_HUE_SAMPLES, dtype=np.float64),
                                  self._input.chroma, self._input.tone)
            temps = np.array([self.raw_temperature(c) for c in hcts], dtype=np.float64)

            # The input joins the candidates last: ties for coldest go to
            # the lowest hue, ties for warmest to the input.
            candidates = hcts + [self._input]
            all_temps = np.append(temps, self.raw_temperature(self._input))
            coldest_idx = int(np.argmin(all_temps))
            warmest_idx = len(all_temps) - 1 - int(np.argmax(all_temps[::-1]))

            self._coldest = candidates[coldest_idx]
            self._warmest = candidates[warmest_idx]
            self._coldest_temp = float(all_temps[coldest_idx])
            self._warmest_temp = float(all_temps[warmest_idx])
            self._temps_by_hue = temps
            self._hcts_by_hue = hcts

    @property
    def hcts_by_hue(self) -> List[HctColor]:
        """Colors at integer hues 0..360 with the input's chroma and tone."""
        self._ensure_tables()
        return list(self._hcts_by_hue)

    @property
    def coldest(self) -> HctColor:
        self._ensure_tables()
        return self._coldest

    @property
    def warmest(self) -> HctColor:
        self._ensure_tables()
        return self._warmest

    # -- relative temperature ----------------------------------------------
    def _relative(self, raw: float) -> float:
        span = self._warmest_temp - self._coldest_temp
        if span == 0.0:
            return 0.5
        return (raw - self._coldest_temp) / span

    def relative_temperature(self, color: HctColor) -> float:
        """
        Temperature of ``color`` on a 0 (coldest) .. 1 (warmest) scale.

        0.5 when every color at this chroma and tone is equally warm, e.g.
        at T0 and T100 where only black or white exists.
        """
        self._ensure_tables()
        return self._relative(self.raw_temperature(color))

    # -- complement --------------------------------------------------------
    @property
    def complement(self) -> HctColor:
        """
        The color as cool-warm as the input is warm-cool.

        Searched on the opposite arc of the coldest/warmest split of the
        hue circle at 1 degree resolution.
        """
        with self._lock:
            if self._complement is not None:
                return self._complement
            self._ensure_tables()

            hcts = self._hcts_by_hue
            coldest_hue = self._coldest.hue
            warmest_hue = self._warmest.hue
            answer = hcts[_round_half_up(self._input.hue)]

            if self._warmest_temp - self._coldest_temp != 0.0:
                start_is_cold_to_warm = _is_between(self._input.hue, coldest_hue, warmest_hue)
                start_hue = warmest_hue if start_is_cold_to_warm else coldest_hue
                end_hue = coldest_hue if start_is_cold_to_warm else warmest_hue
                target = 1.0 - self.relative_temperature(self._input)
                smallest_error = 1000.0

                for hue_addend in range(_HUE_SAMPLES):
                    hue = sanitize_degrees(start_hue + hue_addend)
                    if not _is_between(hue, start_hue, end_hue):
                        continue
                    index = round(hue)
                    error = abs(target - self._relative(self._temps_by_hue[index]))
                    if error < smallest_error:
                        smallest_error = error
                        answer = hcts[index]

            self._complement = answer
            return answer

    # -- analogous ---------------------------------------------------------
    @property
    def analogous(self) -> List[HctColor]:
        """Five analogous colors from a twelve-way division of the wheel."""
        return self.analogous_colors(5, 12)

    def analogous_colors(self, count: int = 5, divisions: int = 12) -> List[HctColor]:
        """
        Colors adjacent in hue and equidistant in temperature.

        The hue circle, walked clockwise from the input, is cut into
        ``divisions`` groups of equal cumulative temperature change.
        ``count`` of them are returned, centred on the input:
        counter-clockwise neighbours, the input, clockwise neighbours.

        Args:
            count: Number of colors returned, the input included.
            divisions: Number of divisions of the color wheel.

        Raises:
            ValueError: ``count`` or ``divisions`` is not positive, or
                ``divisions < count``.
        """
        if count <= 0 or divisions <= 0:
            raise ValueError(
                f"count and divisions must be positive, got count={count}, "
                f"divisions={divisions}")
        if divisions < count:
            raise ValueError(
                f"divisions ({divisions}) must be >= count ({count})")

        self._ensure_tables()
        hcts = self._hcts_by_hue
        relative = [self._relative(t) for t in self._temps_by_hue]

        start_hue = _round_half_up(self._input.hue)
        start_hct = hcts[start_hue]
        last_temp = relative[start_hue]
        all_colors: List[HctColor] = [start_hct]

        absolute_total_temp_delta = 0.0
        for i in range(360):
            temp = relative[(start_hue + i) % 360]
            absolute_total_temp_delta += abs(temp - last_temp)
            last_temp = temp

        hue_addend = 1
        temp_step = absolute_total_temp_delta / float(divisions)
        total_temp_delta = 0.0
        last_temp = relative[start_hue]
        while len(all_colors) < divisions:
            hue = (start_hue + hue_addend) % 360
            hct = hcts[hue]
            temp = relative[hue]
            total_temp_delta += abs(temp - last_temp)

            desired = len(all_colors) * temp_step
            satisfied = total_temp_delta >= desired
            index_addend = 1
            # A hue can fill several divisions when the temperature jumps
            # past more than one step; near-achromatic inputs fill them all.
            while satisfied and len(all_colors) < divisions:
                all_colors.append(hct)
                desired = (len(all_colors) + index_addend) * temp_step
                satisfied = total_temp_delta >= desired
                index_addend += 1

            last_temp = temp
            hue_addend += 1
            if hue_addend > 360:
                while len(all_colors) < divisions:
                    all_colors.append(hct)
                break

        answers: List[HctColor] = [self._input]
        ring = len(all_colors)

        ccw_count = (count - 1) // 2
        for i in range(1, ccw_count + 1):
            answers.insert(0, all_colors[(-i) % ring])

        cw_count = count - ccw_count - 1
        for i in range(1, cw_count + 1):
            answers.append(all_colors[i % ring])

        return answers
