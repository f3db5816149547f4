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

import argparse

import cv2

from .logging import Printer


def str2bool(v):
    if isinstance(v, bool):
        return v
    if v.lower() in ("yes", "true", "t", "y", "1"):
        return True
    elif v.lower() in ("no", "false", "f", "n", "0"):
        return False
    else:
        raise argparse.ArgumentTypeError(f"Boolean value expected, got {v!r}")


# Python has no NDEBUG macro: running with -O (or -OO) strips asserts and sets __debug__ to False
def get_build_mode():
    return "debug" if __debug__ else "release"


# Returns the number of CUDA devices visible to OpenCV (0 if OpenCV was built without CUDA)
def get_opencv_cuda_device_count():
    try:
        return cv2.cuda.getCudaEnabledDeviceCount()
    except (AttributeError, cv2.error):
        return 0


def print_opencv_cuda_device_info():
    device_id = cv2.cuda.getDevice()
    Printer.green(f"OpenCV CUDA device: {device_id}")
    cv2.cuda.printShortCudaDeviceInfo(device_id)
