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
import colorsys
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple, Union

import numpy as np

from pysegviz.errors import ConfigurationError, LabelParseError


kScriptPath = os.path.realpath(__file__)
kScriptFolder = os.path.dirname(kScriptPath)
kRootFolder = os.path.join(kScriptFolder, "..", "..")
kDataFolder = os.path.join(kRootFolder, "data")
kDefaultLabelFile = os.path.join(kDataFolder, "pascal-classes.txt")

kBackgroundLabelId = 0

RGB = Tuple[int, int, int]


@dataclass(frozen=True)
class Label:
    id: int
    name: str
    color: RGB  # (r, g, b) in [0, 255]


class LabelTable:
    """
    Ordered, read-only collection of labels indexed by class id.

    The class id is the position of the label in the table: ids are dense, start at 0
    and must match the class-index space of the segmentation model (0 = background).
    The table is built once at startup and then shared by reference: no method mutates it.
    """

    def __init__(self, labels: Sequence[Label]):
        self._labels = tuple(labels)
        for i, label in enumerate(self._labels):
            if label.id != i:
                raise ConfigurationError(f"label ids must be dense: got id {label.id} at position {i}")
        colors = np.array([label.color for label in self._labels], dtype=np.uint8).reshape(-1, 3)
        colors.setflags(write=False)
        self._colors = colors

    @staticmethod
    def from_lists(names: Sequence[str], colors) -> "LabelTable":
        colors = np.asarray(colors)
        if len(names) != len(colors):
            raise ConfigurationError(f"got {len(names)} names but {len(colors)} colors")
        labels = []
        for i, (name, color) in enumerate(zip(names, colors)):
            labels.append(Label(i, str(name), _check_color([int(c) for c in color], i + 1)))
        return LabelTable(labels)

    @staticmethod
    def load(source) -> "LabelTable":
        return load_label_table(source)

    def size(self) -> int:
        return len(self._labels)

    def __len__(self):
        return len(self._labels)

    def __iter__(self):
        return iter(self._labels)

    def __getitem__(self, label_id) -> Label:
        return self._labels[self._check_id(label_id)]

    def _check_id(self, label_id) -> int:
        label_id = int(label_id)
        if not 0 <= label_id < len(self._labels):
            raise IndexError(f"label id {label_id} out of range [0, {len(self._labels)})")
        return label_id

    def color_of(self, label_id) -> RGB:
        return self._labels[self._check_id(label_id)].color

    def name_of(self, label_id) -> str:
        return self._labels[self._check_id(label_id)].name

    @property
    def names(self):
        return [label.name for label in self._labels]

    # (N, 3) uint8 read-only array of RGB colors, row i is the color of label i
    @property
    def colors(self) -> np.ndarray:
        return self._colors

    def __repr__(self):
        return f"LabelTable(size={len(self._labels)})"


def _check_color(components, line_number, line=None) -> RGB:
    if len(components) != 3:
        raise LabelParseError(
            f"expected 3 color components, got {len(components)}", line_number, line
        )
    for c in components:
        if not 0 <= c <= 255:
            raise LabelParseError(f"color component {c} out of range [0, 255]", line_number, line)
    return tuple(components)


def parse_label_lines(lines: Iterable[str]) -> LabelTable:
    """
    Parse lines of the form '<name> <r> <g> <b>' into a LabelTable.

    Parsing is lenient: a line without a name token (blank or whitespace-only line) is skipped,
    so trailing blank lines are tolerated. A line with a name and a malformed color raises
    LabelParseError. An empty result raises ConfigurationError.
    """
    labels = []
    for line_number, line in enumerate(lines, start=1):
        tokens = line.split()
        if not tokens:
            continue
        name, color_tokens = tokens[0], tokens[1:]
        try:
            components = [int(t) for t in color_tokens]
        except ValueError:
            raise LabelParseError("color components must be integers", line_number, line)
        labels.append(Label(len(labels), name, _check_color(components, line_number, line)))
    if not labels:
        raise ConfigurationError("no valid label found")
    return LabelTable(labels)


def load_label_table(source: Union[str, os.PathLike, Iterable[str]] = kDefaultLabelFile) -> LabelTable:
    """
    Load a label table from a file path or from an iterable of text lines.
    Raises ConfigurationError if the file is missing or no label can be read.
    """
    if isinstance(source, (str, os.PathLike)):
        if not os.path.isfile(source):
            raise ConfigurationError(f"label file not found: {source}")
        with open(source, "r") as f:
            try:
                return parse_label_lines(f)
            except LabelParseError as e:
                error = LabelParseError(f"{source}: {e}")
                error.line_number, error.line = e.line_number, e.line
                raise error from e
            except ConfigurationError as e:
                raise ConfigurationError(f"{source}: {e}") from e
    return parse_label_lines(source)


def generate_hsv_color_map(n: int, s=0.65, v=0.95):
    """Generates `n` visually distinct RGB colors using HSV color space.

    Args:
        n (int): Number of colors to generate.
        s (float): Saturation (0-1)
        v (float): Brightness/Value (0-1)

    Returns:
        np.ndarray: (n, 3) array with RGB values in [0, 255]
    """
    hsv_colors = [(i / n, s, v) for i in range(n)]
    rgb_colors = [colorsys.hsv_to_rgb(*hsv) for hsv in hsv_colors]
    rgb_colors = [(int(r * 255), int(g * 255), int(b * 255)) for r, g, b in rgb_colors]
    return np.array(rgb_colors, dtype=np.uint8)


# Label table for a model with an arbitrary number of classes: black background, HSV colors for the rest
def generic_label_table(num_classes: int) -> LabelTable:
    if num_classes < 1:
        raise ConfigurationError(f"num_classes must be >= 1, got {num_classes}")
    colors = np.zeros((num_classes, 3), dtype=np.uint8)
    if num_classes > 1:
        colors[1:] = generate_hsv_color_map(num_classes - 1)
    names = ["background"] + [f"class_{i}" for i in range(1, num_classes)]
    return LabelTable.from_lists(names, colors)


# ==============================================
# PASCAL VOC
# ==============================================
# https://www.robots.ox.ac.uk/~vgg/projects/pascal/VOC/


def get_voc_color_map():
    """Load the mapping that associates pascal VOC classes with label colors
    Returns:
        np.ndarray with dimensions (21, 3)
    """
    color_map = np.array(
        [
            [0, 0, 0],  # 0=background
            [128, 0, 0],  # 1=aeroplane
            [0, 128, 0],  # 2=bicycle
            [128, 128, 0],  # 3=bird
            [0, 0, 128],  # 4=boat
            [128, 0, 128],  # 5=bottle
            [0, 128, 128],  # 6=bus
            [128, 128, 128],  # 7=car
            [64, 0, 0],  # 8=cat
            [192, 0, 0],  # 9=chair
            [64, 128, 0],  # 10=cow
            [192, 128, 0],  # 11=diningtable
            [64, 0, 128],  # 12=dog
            [192, 0, 128],  # 13=horse
            [64, 128, 128],  # 14=motorbike
            [192, 128, 128],  # 15=person
            [0, 64, 0],  # 16=pottedplant
            [128, 64, 0],  # 17=sheep
            [0, 192, 0],  # 18=sofa
            [128, 192, 0],  # 19=train
            [0, 64, 128],  # 20=tvmonitor
        ],
        dtype=np.uint8,
    )
    return color_map


def get_voc_labels():
    return [
        "background",
        "aeroplane",
        "bicycle",
        "bird",
        "boat",
        "bottle",
        "bus",
        "car",
        "cat",
        "chair",
        "cow",
        "diningtable",
        "dog",
        "horse",
        "motorbike",
        "person",
        "pottedplant",
        "sheep",
        "sofa",
        "train",
        "tvmonitor",
    ]


def voc_label_table() -> LabelTable:
    return LabelTable.from_lists(get_voc_labels(), get_voc_color_map())
