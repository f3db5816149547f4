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

import os

import cv2

from pysegviz.config_parameters import Parameters
from pysegviz.errors import ConfigurationError, InvalidInput
from pysegviz.utilities.logging import Printer


# Base class of the frame sinks. emit() returns True if the sink asks the pipeline to stop.
class FrameSink:
    def emit(self, frame) -> bool:
        raise NotImplementedError

    def release(self):
        pass


# Interactive display: shows the frame in a window and polls the keyboard for the stop keys
class DisplaySink(FrameSink):
    def __init__(self, window_name=None, delay_ms=None, stop_keys=None):
        self.window_name = window_name if window_name is not None else Parameters.kWindowName
        self.delay_ms = delay_ms if delay_ms is not None else Parameters.kDisplayDelayMs
        self.stop_keys = tuple(stop_keys if stop_keys is not None else Parameters.kStopKeys)
        self.is_window_created = False

    def show(self, frame):
        if not self.is_window_created:
            cv2.namedWindow(self.window_name)
            self.is_window_created = True
        cv2.imshow(self.window_name, frame)

    def poll_stop(self):
        key = cv2.waitKey(self.delay_ms)
        return key != -1 and (key & 0xFF) in self.stop_keys

    def emit(self, frame) -> bool:
        self.show(frame)
        return self.poll_stop()

    def release(self):
        if self.is_window_created:
            cv2.destroyWindow(self.window_name)
            self.is_window_created = False


# Persistent sink: fixed size, fixed frame rate video file
class VideoWriterSink(FrameSink):
    def __init__(
        self,
        path,
        fps,
        size,
        fourcc=None,
        extension=None,
    ):
        fourcc = fourcc if fourcc is not None else Parameters.kOutputVideoFourcc
        extension = extension if extension is not None else Parameters.kOutputVideoExtension
        if not path:
            raise ConfigurationError("VideoWriterSink: empty output path")
        if not path.endswith(extension):
            path = path + extension
        folder = os.path.dirname(path)
        if folder and not os.path.exists(folder):
            os.makedirs(folder)
        if fps is None or fps <= 0:
            Printer.orange(f"VideoWriterSink: invalid fps {fps}, using {Parameters.kDefaultFps}")
            fps = Parameters.kDefaultFps
        self.path = path
        self.fps = fps
        self.size = (int(size[0]), int(size[1]))  # (width, height)
        self.writer = cv2.VideoWriter(path, cv2.VideoWriter_fourcc(*fourcc), fps, self.size)
        if not self.writer.isOpened():
            raise ConfigurationError(f"VideoWriterSink: cannot open output video: {path}")
        Printer.green(f"Writing output video to {path} ({self.size[0]}x{self.size[1]} @ {fps} fps)")

    def write_frame(self, frame):
        height, width = frame.shape[:2]
        if (width, height) != self.size:
            raise InvalidInput(f"VideoWriterSink: frame size {width}x{height} differs from {self.size[0]}x{self.size[1]}")
        self.writer.write(frame)

    def emit(self, frame) -> bool:
        self.write_frame(frame)
        return False

    def release(self):
        if self.writer is not None:
            self.writer.release()
            self.writer = None
