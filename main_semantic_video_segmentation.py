#!/usr/bin/env -S python3 -O
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

import sys
import argparse

from pysegviz.config import Config, kDefaultConfigPath
from pysegviz.config_parameters import Parameters
from pysegviz.errors import ConfigurationError, InvalidInput
from pysegviz.io.frame_sink import DisplaySink, VideoWriterSink
from pysegviz.io.frame_source import VideoFrameSource
from pysegviz.pipeline.frame_pipeline import FramePipeline, StopReason
from pysegviz.semantics.compositor import Compositor
from pysegviz.semantics.semantic_labels import load_label_table
from pysegviz.semantics.semantic_segmentation_factory import semantic_segmentation_factory
from pysegviz.utilities.logging import Printer
from pysegviz.utilities.system import str2bool


def build_arg_parser():
    parser = argparse.ArgumentParser(
        description="Real-time semantic segmentation of a video with colorized overlay",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "-i",
        "--in",
        dest="input",
        type=str,
        default="",
        help="Path to input file (empty: default video camera)",
    )
    parser.add_argument(
        "-o",
        "--out",
        dest="output",
        type=str,
        default="",
        help="Path to output file, '.mp4' is appended (empty: no output file)",
    )
    parser.add_argument(
        "-c",
        "--cuda",
        type=str2bool,
        default=None,
        help="Set CUDA enable (default: use_cuda from the config file)",
    )
    parser.add_argument(
        "-f",
        "--frame",
        type=int,
        default=None,
        help="Set frame number: decode one frame every N captured frames (default: frame_stride from the config file)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=kDefaultConfigPath,
        help="Path to the yaml config file",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=None,
        choices=["FCN8S", "DEEPLABV3"],
        help="Segmentation model (default: type from the config file)",
    )
    parser.add_argument(
        "--no_display",
        action="store_true",
        help="Do not show the output window",
    )
    return parser


def build_pipeline(args, config: Config):
    use_cuda = args.cuda if args.cuda is not None else config.use_cuda
    frame_stride = args.frame if args.frame is not None else config.frame_stride
    if frame_stride < 1:
        raise ConfigurationError(f"frame number must be >= 1, got {frame_stride}")
    model_type = args.model if args.model is not None else config.semantic_segmentation_type

    # startup errors are raised here, before any frame is read
    label_table = load_label_table(config.label_file)
    Printer.green(f"Loaded {label_table.size()} labels from {config.label_file}")

    frame_source = VideoFrameSource(args.input)
    try:
        segmentation = semantic_segmentation_factory(model_type, use_cuda=use_cuda, **config.model_settings)
        if segmentation.num_classes() > label_table.size():
            raise ConfigurationError(
                f"the model has {segmentation.num_classes()} classes but the label table only {label_table.size()}"
            )

        sinks = []
        if config.display and not args.no_display:
            sinks.append(DisplaySink(window_name=config.window_name))
        if args.output:
            fps = frame_source.fps if frame_source.fps > 0 else Parameters.kDefaultFps
            sinks.append(VideoWriterSink(args.output, fps, config.processing_size))
    except BaseException:
        frame_source.release()
        raise

    compositor = Compositor(label_table, source_weight=config.source_weight, mask_weight=config.mask_weight)
    return FramePipeline(
        frame_source,
        segmentation,
        label_table,
        sinks=sinks,
        frame_stride=frame_stride,
        processing_size=config.processing_size,
        compositor=compositor,
        inference_timeout=config.inference_timeout,
    )


def main(argv=None):
    args = build_arg_parser().parse_args(argv)
    try:
        config = Config(args.config)
        pipeline = build_pipeline(args, config)
    except ConfigurationError as e:
        Printer.red(f"Error: {e}")
        return 1

    report = pipeline.run()
    if report.stop_reason == StopReason.INVALID_INPUT or isinstance(report.error, InvalidInput):
        return 1
    if report.stop_reason == StopReason.END_OF_STREAM and not args.input:
        # a live camera is not supposed to end
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
