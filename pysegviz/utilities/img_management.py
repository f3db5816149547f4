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
import cv2


# resize an image to (width, height) if needed
def resize_img(img, size, interpolation=cv2.INTER_LINEAR):
    width, height = size
    if img.shape[1] == width and img.shape[0] == height:
        return img
    return cv2.resize(img, (width, height), interpolation=interpolation)


# convert a gray image to a 3-channel image, leave color images untouched
def to_color_img(img):
    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
    if img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2BGR)
    return img


# saturated linear blend of two same-sized uint8 images
def blend_images(img1, w1, img2, w2):
    return cv2.addWeighted(img1, w1, img2, w2, 0)


class ImgWriter:
    kFont = cv2.FONT_HERSHEY_PLAIN
    kFontScale = 1.1
    kFontColor = (0, 255, 0)  # BGR
    kFontThickness = 1
    kFontLineType = cv2.LINE_AA

    def __init__(
        self,
        font=kFont,
        font_scale=kFontScale,
        font_color=kFontColor,
        font_thickness=kFontThickness,
        font_line_type=kFontLineType,
    ):
        self.font = font
        self.font_scale = font_scale
        self.font_color = font_color
        self.font_thickness = font_thickness
        self.font_line_type = font_line_type

    def text_size(self, text):
        (w, h), baseline = cv2.getTextSize(text, self.font, self.font_scale, self.font_thickness)
        return w, h, baseline

    def write(self, img, text, pos):
        cv2.putText(
            img,
            text,
            (int(pos[0]), int(pos[1])),
            self.font,
            self.font_scale,
            self.font_color,
            self.font_thickness,
            self.font_line_type,
        )

    # write text so that it ends at x = img_width - margin
    def write_right_aligned(self, img, text, y, margin=10):
        w, _, _ = self.text_size(text)
        x = max(0, img.shape[1] - w - margin)
        self.write(img, text, (x, y))
