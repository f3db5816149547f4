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

import numpy as np

from .semantic_segmentation_types import BackendType


# Base class for the inference collaborators of the frame pipeline
class SemanticSegmentationBase:
    def __init__(self, model, backend_type=BackendType.CPU):
        self.model = model
        self.backend_type = backend_type

    # Run inference on an image.
    # Args:
    #     image: numpy array of shape (H, W, 3) in BGR format (OpenCV format)
    # Returns:
    #     numpy float32 array of shape (1, num_classes, H', W') with the raw class scores
    def infer_scores(self, image) -> np.ndarray:
        raise NotImplementedError

    def num_classes(self):
        raise NotImplementedError

    def backend_name(self):
        return self.backend_type.name

    def release(self):
        self.model = None
