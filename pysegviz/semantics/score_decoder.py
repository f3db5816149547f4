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


kMaxNumClasses = 256  # label masks are uint8


class ScoreVolume:
    """
    Read-only view over a score volume of shape (num_classes, height, width).

    A leading batch axis of size 1, as returned by the inference collaborators
    (shape (1, num_classes, height, width)), is squeezed.
    """

    def __init__(self, scores):
        scores = np.asarray(scores)
        if scores.ndim == 4:
            if scores.shape[0] != 1:
                raise InvalidInput(f"expected a batch of one score volume, got batch size {scores.shape[0]}")
            scores = scores[0]
        if scores.ndim != 3:
            raise InvalidInput(f"score volume must be 3D (classes, height, width), got shape {scores.shape}")
        if scores.shape[0] == 0:
            raise InvalidInput("score volume has no class channel")
        if scores.shape[0] > kMaxNumClasses:
            raise InvalidInput(f"score volume has {scores.shape[0]} channels, at most {kMaxNumClasses} supported")
        if not np.issubdtype(scores.dtype, np.number):
            raise InvalidInput(f"score volume must be numeric, got dtype {scores.dtype}")
        scores = scores.view()
        scores.setflags(write=False)
        self._scores = scores

    @property
    def num_classes(self):
        return self._scores.shape[0]

    @property
    def height(self):
        return self._scores.shape[1]

    @property
    def width(self):
        return self._scores.shape[2]

    @property
    def shape(self):
        return self._scores.shape

    def value(self, channel, row, col):
        if not (0 <= channel < self.num_classes and 0 <= row < self.height and 0 <= col < self.width):
            raise IndexError(f"({channel}, {row}, {col}) out of bounds for score volume of shape {self.shape}")
        return self._scores[channel, row, col]

    # (height, width) read-only slice of the given channel
    def channel(self, channel):
        if not 0 <= channel < self.num_classes:
            raise IndexError(f"channel {channel} out of range [0, {self.num_classes})")
        return self._scores[channel]


class ScoreDecoder:
    """
    Turns a score volume into a label mask by selecting, for every pixel, the channel with the
    maximum score.

    Ties are resolved in favour of the first channel holding the maximum: channels are scanned
    in increasing index order and a channel replaces the current winner only if its score is
    strictly greater. An all-equal volume therefore decodes to 0 (background) everywhere.
    """

    def __init__(self, num_labels=None):
        self.num_labels = num_labels  # if set, the number of channels cannot exceed the label table size

    def decode(self, scores) -> np.ndarray:
        volume = scores if isinstance(scores, ScoreVolume) else ScoreVolume(scores)
        if self.num_labels is not None and volume.num_classes > self.num_labels:
            raise InvalidInput(
                f"score volume has {volume.num_classes} channels but the label table has {self.num_labels} labels"
            )
        # channel-major scan, keep max so far with strict greater-than
        max_val = np.array(volume.channel(0), copy=True)
        max_cl = np.zeros((volume.height, volume.width), dtype=np.uint8)
        for c in range(1, volume.num_classes):
            score = volume.channel(c)
            better = score > max_val
            max_val[better] = score[better]
            max_cl[better] = c
        return max_cl

    __call__ = decode
