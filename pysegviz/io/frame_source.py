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

import cv2

from pysegviz.errors import ConfigurationError
from pysegviz.utilities.logging import Printer
from pysegviz.utilities.serialization import SerializableEnum


class FrameSourceType(SerializableEnum):
    VIDEO = 0  # video file or stream url
    LIVE = 1  # capture device


# Sentinel returned by read_frame() when the source is exhausted or disconnected
class EndOfStreamType:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "EndOfStream"


EndOfStream = EndOfStreamType()


# Base class of the frame sources: read_frame() returns a BGR image or EndOfStream
class FrameSource:
    def __init__(self, type=FrameSourceType.VIDEO):
        self.type = type
        self.width = 0
        self.height = 0
        self.fps = 0.0
        self.num_frames_read = 0

    def read_frame(self):
        raise NotImplementedError

    def release(self):
        pass


class VideoFrameSource(FrameSource):
    """
    Frame source backed by cv2.VideoCapture.
    An empty path (or None) opens the default capture device, an integer (or a string
    made of digits) opens the corresponding capture device, anything else is a video file/url.
    """

    def __init__(self, path=""):
        if path is None or path == "":
            target, type = cv2.CAP_ANY, FrameSourceType.LIVE
        elif isinstance(path, int) or (isinstance(path, str) and path.isdigit()):
            target, type = int(path), FrameSourceType.LIVE
        else:
            target, type = str(path), FrameSourceType.VIDEO
        super().__init__(type)
        self.path = path
        self.cap = cv2.VideoCapture(target)
        if not self.cap.isOpened():
            raise ConfigurationError(f"Cannot open video: {path if path else 'default camera'}")
        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        self.fps = float(self.cap.get(cv2.CAP_PROP_FPS))
        Printer.green(f"Resolution of video: {self.width} x {self.height}.")
        Printer.green(f"Frames per seconds: {self.fps}.")

    def read_frame(self):
        if self.cap is None:
            return EndOfStream
        ret, image = self.cap.read()
        if not ret or image is None:
            return EndOfStream
        self.num_frames_read += 1
        return image

    def release(self):
        if self.cap is not None:
            self.cap.release()
            self.cap = None


# Frame source over an in-memory sequence of images (tests, image folders already loaded)
class ListFrameSource(FrameSource):
    def __init__(self, frames, fps=0.0):
        super().__init__(FrameSourceType.VIDEO)
        self.frames = list(frames)
        self.fps = fps
        if self.frames:
            self.height, self.width = self.frames[0].shape[:2]
        self._idx = 0
        self.is_released = False

    def read_frame(self):
        if self.is_released or self._idx >= len(self.frames):
            return EndOfStream
        frame = self.frames[self._idx]
        self._idx += 1
        self.num_frames_read += 1
        return frame

    def release(self):
        self.is_released = True
