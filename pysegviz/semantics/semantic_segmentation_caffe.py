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
import numpy as np

from pysegviz.errors import ConfigurationError
from pysegviz.utilities.logging import Printer
from pysegviz.utilities.system import get_opencv_cuda_device_count, print_opencv_cuda_device_info

from .semantic_segmentation_base import SemanticSegmentationBase
from .semantic_segmentation_types import BackendType

kScriptPath = os.path.realpath(__file__)
kScriptFolder = os.path.dirname(kScriptPath)
kRootFolder = os.path.join(kScriptFolder, "..", "..")
kDataFolder = os.path.join(kRootFolder, "data")

kDefaultDeployFile = os.path.join(kDataFolder, "fcn8s-heavy-pascal.prototxt")
kDefaultModelFile = os.path.join(kDataFolder, "fcn8s-heavy-pascal.caffemodel")


# FCN-8s semantic segmentation (PASCAL VOC, 21 classes) run with the OpenCV DNN module
class SemanticSegmentationCaffe(SemanticSegmentationBase):
    kInputLayer = "data"
    kOutputLayer = "score"
    kNumClasses = 21

    def __init__(self, deploy_file=kDefaultDeployFile, model_file=kDefaultModelFile, use_cuda=True, **kwargs):
        for path in (deploy_file, model_file):
            if not os.path.isfile(path):
                raise ConfigurationError(f"SemanticSegmentationCaffe: file not found: {path}")
        try:
            net = cv2.dnn.readNetFromCaffe(deploy_file, model_file)
        except cv2.error as e:
            raise ConfigurationError(f"SemanticSegmentationCaffe: could not load Caffe net: {e}") from e
        if net.empty():
            raise ConfigurationError("SemanticSegmentationCaffe: could not load Caffe net")

        backend_type = self.init_backend(net, use_cuda)
        super().__init__(net, backend_type)

    def init_backend(self, net, use_cuda):
        if use_cuda and get_opencv_cuda_device_count() > 0:
            print_opencv_cuda_device_info()
            net.setPreferableBackend(cv2.dnn.DNN_BACKEND_CUDA)
            net.setPreferableTarget(cv2.dnn.DNN_TARGET_CUDA)
            Printer.green("SemanticSegmentationCaffe: Using CUDA")
            return BackendType.GPU
        print("SemanticSegmentationCaffe: Using CPU")
        return BackendType.CPU

    def num_classes(self):
        return self.kNumClasses

    def infer_scores(self, image) -> np.ndarray:
        blob = cv2.dnn.blobFromImage(image)
        self.model.setInput(blob, self.kInputLayer)
        score = self.model.forward(self.kOutputLayer)
        return np.asarray(score, dtype=np.float32)
