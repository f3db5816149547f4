"""
* This file is part of PYSEGVIZ
*
* Copyright (C) 2026-present the PYSEGVIZ authors
*
* PYSEGVIZ is free software: you can redistribute it and/or modify
* it under the terms of the GNU General Public License as published by
* the Free Software Foundation, either version 3 of the License, or
* (at your option) any later version.
*
* PYSEGVIZ is distributed in the hope that it will be useful,
* but WITHOUT ANY WARRANTY; without even the implied warranty of
* MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
* GNU General Public License for more details.
*
* You should have received a copy of the GNU General Public License
* along with PYSEGVIZ. If not, see <http://www.gnu.org/licenses/>.
"""

from collections import deque

import cv2

from .logging import Printer


timer_print = Printer.cyan


class Timer:
    def __init__(self, name="", is_verbose=False):
        self._name = name
        self._is_verbose = is_verbose
        self._start_time = None
        self._elapsed = 0
        self.start()

    def start(self):
        self._start_time = cv2.getTickCount()

    # elapsed time in seconds
    def elapsed(self):
        now = cv2.getTickCount()
        self._elapsed = (now - self._start_time) / cv2.getTickFrequency()
        if self._is_verbose:
            timer_print(f"Timer::{self._name} - elapsed: {self._elapsed}")
        return self._elapsed


# Measures the average period between two refresh() calls over a sliding window
class TimerFps(Timer):
    def __init__(self, name="", average_width=10, is_verbose=True):
        super().__init__(name, is_verbose=False)
        self._print_fps = is_verbose
        self._periods = deque(maxlen=max(1, average_width))

    def refresh(self):
        self._periods.append(self.elapsed())
        self.start()
        if self._print_fps:
            dT = self.average_period()
            fps = 1.0 / dT if dT > 0 else float("inf")
            timer_print(f"Timer::{self._name} - fps: {fps:.2f}, T: {dT:.4f}")

    def average_period(self):
        if not self._periods:
            return 0.0
        return sum(self._periods) / len(self._periods)
