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


# Base class of all the errors raised by the segmentation pipeline
class PipelineError(Exception):
    pass


# Fatal, startup only: label file missing/empty/unparsable, frame source cannot be opened, bad config
class ConfigurationError(PipelineError):
    pass


class LabelParseError(ConfigurationError):
    def __init__(self, message, line_number=None, line=None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
            if line is not None:
                message += f" ({line.strip()!r})"
        super().__init__(message)
        self.line_number = line_number
        self.line = line


# Fatal, loop terminating: the frame source is disconnected or ended
class InputExhausted(PipelineError):
    pass


# Fatal, loop terminating: inference result (or derived mask) inconsistent with the expected shape/labels
class InvalidInput(PipelineError):
    pass


# Recovered locally: a single overlay element could not be drawn
class RenderDegradation(PipelineError):
    pass


# Recoverable: the inference collaborator did not answer within the configured bounded wait
class InferenceTimeout(PipelineError):
    def __init__(self, timeout_s):
        super().__init__(f"inference did not complete within {timeout_s:.3f} s")
        self.timeout_s = timeout_s
