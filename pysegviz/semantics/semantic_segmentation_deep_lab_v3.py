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

import numpy as np
import torch
from torchvision.models.segmentation import (
    deeplabv3_resnet50,
    deeplabv3_resnet101,
    deeplabv3_mobilenet_v3_large,
    DeepLabV3_ResNet50_Weights,
    DeepLabV3_ResNet101_Weights,
    DeepLabV3_MobileNet_V3_Large_Weights,
)

from pysegviz.errors import ConfigurationError
from pysegviz.utilities.logging import Printer

from .semantic_segmentation_base import SemanticSegmentationBase
from .semantic_segmentation_types import BackendType


# torchvision DeepLab v3 trained on the PASCAL VOC classes (21 classes, same ids as FCN-8s)
class SemanticSegmentationDeepLabV3(SemanticSegmentationBase):
    model_configs = {
        "resnet50": {"model": deeplabv3_resnet50, "weights": DeepLabV3_ResNet50_Weights.DEFAULT},
        "resnet101": {"model": deeplabv3_resnet101, "weights": DeepLabV3_ResNet101_Weights.DEFAULT},
        "mobilenetv3": {
            "model": deeplabv3_mobilenet_v3_large,
            "weights": DeepLabV3_MobileNet_V3_Large_Weights.DEFAULT,
        },
    }
    kNumClasses = 21

    def __init__(self, encoder_name="mobilenetv3", model_path="", use_cuda=True, device=None, **kwargs):
        self.device = self.init_device(device, use_cuda)
        model, transform = self.init_model(self.device, encoder_name, model_path)
        self.transform = transform
        backend_type = BackendType.GPU if self.device.type == "cuda" else BackendType.CPU
        super().__init__(model, backend_type)

    def init_model(self, device, encoder_name, model_path):
        if encoder_name not in self.model_configs:
            raise ConfigurationError(
                f"Encoder name {encoder_name} is not supported for {self.__class__.__name__}"
            )
        config = self.model_configs[encoder_name]
        if model_path != "":  # Load pre-trained models
            if not os.path.isfile(model_path):
                raise ConfigurationError(f"{self.__class__.__name__}: model file not found: {model_path}")
            model = config["model"](weights=None, weights_backbone=None, num_classes=self.kNumClasses, aux_loss=None)
            model.load_state_dict(torch.load(model_path, map_location="cpu"), strict=False)
        else:
            model = config["model"](weights=config["weights"])
        model = model.to(device).eval()
        transform = config["weights"].transforms()
        return model, transform

    def init_device(self, device, use_cuda):
        if device is None:
            device = torch.device("cuda" if use_cuda and torch.cuda.is_available() else "cpu")
        elif isinstance(device, str):
            device = torch.device(device)
        if device.type == "cuda":
            Printer.green(f"{self.__class__.__name__}: Using CUDA ({torch.cuda.get_device_name(device)})")
        else:
            print(f"{self.__class__.__name__}: Using CPU")
        return device

    def num_classes(self):
        return self.kNumClasses

    @torch.no_grad()
    def infer_scores(self, image) -> np.ndarray:
        height, width = image.shape[:2]
        # BGR (OpenCV) -> RGB, HWC -> CHW
        image_torch = torch.from_numpy(np.ascontiguousarray(image[:, :, ::-1])).permute(2, 0, 1).to(self.device)
        batch = self.transform(image_torch).unsqueeze(0)
        scores = self.model(batch)["out"]
        scores = torch.nn.functional.interpolate(scores, size=(height, width), mode="bilinear", align_corners=False)
        return scores.float().cpu().numpy()
