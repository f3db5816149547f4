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


kScriptPath = os.path.realpath(__file__)
kScriptFolder = os.path.dirname(kScriptPath)
kRootFolder = os.path.join(kScriptFolder, "..")


# List of shared static parameters for configuring the segmentation pipeline
class Parameters:

    # ================================================================
    # Logs
    # ================================================================
    # Folder where logs are stored. This can be changed by pysegviz/config.py to redirect the logs in a different folder.
    kLogsFolder = kRootFolder + "/logs"

    # ================================================================
    # Frame pipeline
    # ================================================================
    kProcessingWidth = 500  # [pixels] frames are resized to this width before inference
    kProcessingHeight = 500  # [pixels] frames are resized to this height before inference
    kFrameStride = 1  # decode one frame every kFrameStride captured frames
    kUseAcceleratedBackend = True  # use CUDA when available
    kInferenceTimeout = None  # [s] bounded wait on inference; None: blocking call
    kPipelineDebugAndPrintToFile = False  # log per-frame timings to logs/frame_pipeline.log
    kPipelineTrackStates = False  # record every state transition of the frame pipeline (debug)

    # ================================================================
    # Visualization
    # ================================================================
    kBlendSourceWeight = 0.3  # weight of the (dimmed) source frame in the composite
    kBlendMaskWeight = 0.7  # weight of the color mask in the composite
    kLabelNamesSeparator = " & "
    kWindowName = "FCN-demo"
    kDisplayDelayMs = 1  # [ms] cv2.waitKey() delay
    kStopKeys = (27, ord("q"))  # Esc, q

    # ================================================================
    # Output video
    # ================================================================
    kOutputVideoExtension = ".mp4"
    kOutputVideoFourcc = "mp4v"
    kDefaultFps = 30.0  # used when the frame source does not report a valid fps


def set_from_dict(cls, config):
    for key, value in config.items():
        if hasattr(cls, key):  # Ensures it is a defined class attribute
            setattr(cls, key, value)
        else:
            print(f"Unknown config key: {key}")


def to_dict(cls):
    return {
        key: getattr(cls, key)
        for key in dir(cls)
        if not key.startswith("__") and not callable(getattr(cls, key))
    }
