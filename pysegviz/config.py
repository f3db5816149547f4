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

import yaml

from pysegviz.config_parameters import Parameters, set_from_dict
from pysegviz.errors import ConfigurationError
from pysegviz.utilities.logging import Printer
from pysegviz.utilities.serialization import dumps


kScriptPath = os.path.realpath(__file__)
kScriptFolder = os.path.dirname(kScriptPath)
kRootFolder = os.path.join(kScriptFolder, "..")  # root folder of the repository
kDefaultConfigPath = os.path.join(kRootFolder, "config.yaml")


# Class for reading the segmentation, visualization and global settings from a yaml file.
# Input:
#   config_path: path to the config yaml file. If None, only the defaults are used.
# Relative paths found in the SEGMENTATION section are resolved against root_folder.
class Config:
    def __init__(self, config_path=kDefaultConfigPath, root_folder=kRootFolder):
        self.root_folder = root_folder
        self.config_path = config_path
        self.config = {}
        if config_path is not None:
            if not os.path.isfile(config_path):
                raise ConfigurationError(f"config file not found: {config_path}")
            with open(config_path, "r") as f:
                try:
                    self.config = yaml.load(f, Loader=yaml.FullLoader) or {}
                except yaml.YAMLError as e:
                    raise ConfigurationError(f"cannot parse {config_path}: {e}") from e
        self.segmentation_settings: dict = dict(self.config.get("SEGMENTATION") or {})
        self.visualization_settings: dict = dict(self.config.get("VISUALIZATION") or {})
        self.global_parameters: dict = dict(self.config.get("GLOBAL_PARAMETERS") or {})
        self.get_and_set_global_parameters()

    # Parameters overridden by the GLOBAL_PARAMETERS section
    def get_and_set_global_parameters(self):
        if self.global_parameters:
            Printer.green(f"Config: setting global parameters: {self.global_parameters}")
            set_from_dict(Parameters, self.global_parameters)

    def _resolve_path(self, path):
        if not path:
            return path
        path = os.path.expanduser(str(path))
        if not os.path.isabs(path):
            path = os.path.join(self.root_folder, path)
        return os.path.normpath(path)

    @property
    def semantic_segmentation_type(self):
        return self.segmentation_settings.get("type", "FCN8S")

    @property
    def label_file(self):
        return self._resolve_path(self.segmentation_settings.get("label_file", "data/pascal-classes.txt"))

    @property
    def model_settings(self):
        settings = {}
        for key in ("deploy_file", "model_file", "model_path"):
            if self.segmentation_settings.get(key):
                settings[key] = self._resolve_path(self.segmentation_settings[key])
        if self.segmentation_settings.get("encoder_name"):
            settings["encoder_name"] = self.segmentation_settings["encoder_name"]
        return settings

    @property
    def use_cuda(self):
        return bool(self.segmentation_settings.get("use_cuda", Parameters.kUseAcceleratedBackend))

    @property
    def frame_stride(self):
        return int(self.segmentation_settings.get("frame_stride", Parameters.kFrameStride))

    @property
    def processing_size(self):
        width = self.segmentation_settings.get("width", Parameters.kProcessingWidth)
        height = self.segmentation_settings.get("height", Parameters.kProcessingHeight)
        return (int(width), int(height))

    @property
    def inference_timeout(self):
        timeout = self.segmentation_settings.get("inference_timeout", Parameters.kInferenceTimeout)
        return float(timeout) if timeout is not None else None

    @property
    def source_weight(self):
        return float(self.visualization_settings.get("source_weight", Parameters.kBlendSourceWeight))

    @property
    def mask_weight(self):
        return float(self.visualization_settings.get("mask_weight", Parameters.kBlendMaskWeight))

    @property
    def window_name(self):
        return self.visualization_settings.get("window_name", Parameters.kWindowName)

    @property
    def display(self):
        return bool(self.visualization_settings.get("display", True))

    def to_json(self):
        return dumps(
            {
                "config_path": self.config_path,
                "semantic_segmentation_type": self.semantic_segmentation_type,
                "label_file": self.label_file,
                "model_settings": self.model_settings,
                "use_cuda": self.use_cuda,
                "frame_stride": self.frame_stride,
                "processing_size": self.processing_size,
                "inference_timeout": self.inference_timeout,
                "source_weight": self.source_weight,
                "mask_weight": self.mask_weight,
                "window_name": self.window_name,
                "display": self.display,
            }
        )
