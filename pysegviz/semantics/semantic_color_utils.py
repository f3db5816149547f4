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

from pysegviz.errors import InvalidInput

from .semantic_labels import LabelTable, kBackgroundLabelId


def check_label_range(label_img, num_classes):
    if label_img.size > 0:
        min_id = int(label_img.min())
        max_id = int(label_img.max())
        if min_id < 0 or max_id >= num_classes:
            raise InvalidInput(
                f"label mask has ids in [{min_id}, {max_id}] but the label table has {num_classes} labels"
            )


# create a color image from a image of labels
def labels_to_image(label_img, semantic_color_map, bgr=False):
    """
    Converts a class label image to an RGB image.
    Args:
        label_img: 2D array of class labels.
        semantic_color_map: (num_classes, 3) array of class RGB colors.
    Returns:
        rgb_output: (H, W, 3) uint8 RGB (or BGR) image.
    """
    semantic_color_map = np.asarray(semantic_color_map, dtype=np.uint8)
    if bgr:
        semantic_color_map = semantic_color_map[:, ::-1]

    label_img = np.asarray(label_img)
    if label_img.ndim != 2:
        raise InvalidInput(f"label mask must be 2D, got shape {label_img.shape}")
    if not np.issubdtype(label_img.dtype, np.integer):
        raise InvalidInput(f"label mask must be of integer type, got dtype {label_img.dtype}")
    # a mismatch between model and label table is reported once for the whole mask
    check_label_range(label_img, len(semantic_color_map))

    return np.ascontiguousarray(semantic_color_map[label_img])


# sorted distinct label ids present in the mask, background excluded
def active_labels(label_img, ignore_labels=(kBackgroundLabelId,)):
    ids = np.unique(np.asarray(label_img))
    return tuple(int(i) for i in ids if int(i) not in ignore_labels)


class Colorizer:
    """
    Maps a label mask to a color mask through a label table and collects the set of labels
    found in the mask. Background (id 0) is colored like any other label but is never part
    of the active label set.
    """

    def __init__(self, label_table: LabelTable, bgr=False):
        self.label_table = label_table
        self.bgr = bgr

    def colorize(self, label_img):
        color_mask = labels_to_image(label_img, self.label_table.colors, bgr=self.bgr)
        return color_mask, active_labels(label_img)

    __call__ = colorize
