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

from pysegviz.utilities.serialization import SerializableEnum


class SemanticSegmentationType(SerializableEnum):
    FCN8S = 0  # Caffe FCN-8s (PASCAL VOC) run with the OpenCV DNN module
    DEEPLABV3 = 1  # torchvision DeepLab v3 (PASCAL VOC)


class BackendType(SerializableEnum):
    CPU = 0
    GPU = 1
