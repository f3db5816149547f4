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

from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

from pysegviz.config_parameters import Parameters
from pysegviz.errors import InvalidInput, RenderDegradation
from pysegviz.utilities.img_management import ImgWriter, blend_images
from pysegviz.utilities.logging import Printer
from pysegviz.utilities.system import get_build_mode

from .semantic_labels import LabelTable, kBackgroundLabelId


kVerbose = True

kTextMargin = 10  # [pixels]
kNamesColor = (0, 0, 255)  # BGR
kInfoColor = (0, 255, 0)  # BGR
kBuildModeX = 180  # [pixels] x position of the build mode
kBackendX = 300  # [pixels] x position of the backend indicator


@dataclass(frozen=True)
class Diagnostics:
    elapsed_seconds: Optional[float] = None  # inference time
    backend_name: Optional[str] = None  # e.g. "GPU" or "CPU"
    width: Optional[int] = None
    height: Optional[int] = None
    build_mode: Optional[str] = None  # "release" or "debug"


# seconds printed with 6 decimals, then cut to 3 (no rounding to the next millisecond)
def format_run_time(elapsed_seconds):
    seconds = f"{elapsed_seconds:.6f}"[:-3]
    return f"run time: {seconds}s"


def format_backend(backend_name):
    if backend_name in ("GPU", "CPU"):
        return f"using {backend_name}s"
    return f"using {backend_name}"


def format_resolution(width, height):
    return f"{width}x{height}"


def join_label_names(active_labels, label_table: LabelTable, separator=None):
    separator = separator if separator is not None else Parameters.kLabelNamesSeparator
    names = []
    for label_id in sorted(active_labels):
        if label_id == kBackgroundLabelId or not 0 <= label_id < label_table.size():
            continue
        name = label_table.name_of(label_id)
        if name:
            names.append(name)
    return separator.join(names)


class Compositor:
    """
    Blends the color mask over the source frame and draws the diagnostic overlay.

    The overlay elements are drawn in this order: active label names (top-left), inference
    run time (bottom-left), build mode, backend indicator and resolution (right-aligned,
    bottom). Each element is optional; an element that cannot be drawn is skipped and
    reported once, the frame is still produced.
    """

    def __init__(
        self,
        label_table: LabelTable,
        source_weight=None,
        mask_weight=None,
        draw_build_mode=True,
    ):
        self.label_table = label_table
        self.source_weight = source_weight if source_weight is not None else Parameters.kBlendSourceWeight
        self.mask_weight = mask_weight if mask_weight is not None else Parameters.kBlendMaskWeight
        self.draw_build_mode = draw_build_mode
        self.names_writer = ImgWriter(
            font=cv2.FONT_HERSHEY_COMPLEX_SMALL, font_scale=1.1, font_color=kNamesColor
        )
        self.info_writer = ImgWriter(font=cv2.FONT_HERSHEY_PLAIN, font_scale=1.1, font_color=kInfoColor)
        self._reported_degradations = set()

    def blend(self, original, color_mask):
        if original.shape != color_mask.shape:
            raise InvalidInput(
                f"source frame shape {original.shape} differs from color mask shape {color_mask.shape}"
            )
        if original.dtype != np.uint8 or color_mask.dtype != np.uint8:
            raise InvalidInput(
                f"source frame and color mask must be uint8, got {original.dtype} and {color_mask.dtype}"
            )
        return blend_images(original, self.source_weight, color_mask, self.mask_weight)

    def composite(self, original, color_mask, active_labels=(), diagnostics: Diagnostics = None, label_table=None):
        label_table = label_table if label_table is not None else self.label_table
        diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        destination = self.blend(original, color_mask)
        height, width = destination.shape[:2]
        bottom = height - kTextMargin

        self._draw("label names", self._draw_label_names, destination, active_labels, label_table)
        if diagnostics.elapsed_seconds is not None:
            self._draw(
                "run time",
                self.info_writer.write,
                destination,
                format_run_time(diagnostics.elapsed_seconds),
                (kTextMargin, bottom),
            )
        if self.draw_build_mode:
            build_mode = diagnostics.build_mode or get_build_mode()
            self._draw("build mode", self.info_writer.write, destination, f"in {build_mode}", (kBuildModeX, bottom))
        if diagnostics.backend_name:
            self._draw(
                "backend",
                self.info_writer.write,
                destination,
                format_backend(diagnostics.backend_name),
                (kBackendX, bottom),
            )
        res_width = diagnostics.width if diagnostics.width is not None else width
        res_height = diagnostics.height if diagnostics.height is not None else height
        self._draw(
            "resolution",
            self.info_writer.write_right_aligned,
            destination,
            format_resolution(res_width, res_height),
            bottom,
        )
        return destination

    __call__ = composite

    def _draw_label_names(self, img, active_labels, label_table):
        text = join_label_names(active_labels, label_table)
        if not text:
            raise RenderDegradation("no active label to name")
        self.names_writer.write(img, text, (kTextMargin, 2 * kTextMargin))

    def _draw(self, element, draw_fn, *args):
        try:
            draw_fn(*args)
        except RenderDegradation:
            # nothing to draw for this element in this frame
            return
        except (cv2.error, ValueError, TypeError) as e:
            if kVerbose and element not in self._reported_degradations:
                self._reported_degradations.add(element)
                Printer.orange(f"Compositor: skipping overlay element '{element}': {e}")
