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

from pysegviz.errors import ConfigurationError
from pysegviz.utilities.logging import Printer

from .semantic_segmentation_types import SemanticSegmentationType


# NOTE: the model modules are imported lazily, torch is only needed by DEEPLABV3
def semantic_segmentation_factory(
    semantic_segmentation_type=SemanticSegmentationType.FCN8S,
    use_cuda=True,
    **kwargs,
):
    if isinstance(semantic_segmentation_type, str):
        try:
            semantic_segmentation_type = SemanticSegmentationType.from_string(semantic_segmentation_type)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
    Printer.green(f"Initializing semantic segmentation: {semantic_segmentation_type}, use_cuda: {use_cuda}")
    if semantic_segmentation_type == SemanticSegmentationType.FCN8S:
        from .semantic_segmentation_caffe import SemanticSegmentationCaffe

        return SemanticSegmentationCaffe(use_cuda=use_cuda, **kwargs)
    elif semantic_segmentation_type == SemanticSegmentationType.DEEPLABV3:
        from .semantic_segmentation_deep_lab_v3 import SemanticSegmentationDeepLabV3

        return SemanticSegmentationDeepLabV3(use_cuda=use_cuda, **kwargs)
    else:
        raise ConfigurationError(f"Invalid semantic segmentation type: {semantic_segmentation_type}")
