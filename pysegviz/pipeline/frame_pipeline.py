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

import threading
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError, wait
from dataclasses import dataclass, field
from typing import Optional

import cv2

from pysegviz.config_parameters import Parameters
from pysegviz.errors import InferenceTimeout, InputExhausted, InvalidInput, PipelineError
from pysegviz.io.frame_source import EndOfStream
from pysegviz.semantics.compositor import Compositor, Diagnostics
from pysegviz.semantics.score_decoder import ScoreDecoder
from pysegviz.semantics.semantic_color_utils import Colorizer
from pysegviz.utilities.img_management import resize_img, to_color_img
from pysegviz.utilities.logging import Logging, Printer
from pysegviz.utilities.serialization import SerializableEnum, dumps
from pysegviz.utilities.timer import Timer, TimerFps


kVerbose = True
kTimerVerbose = False  # print the average throughput at every frame


class PipelineState(SerializableEnum):
    IDLE = 0
    CAPTURING = 1
    DECODING = 2
    RENDERING = 3
    EMITTED = 4
    STOPPED = 5


class StopReason(SerializableEnum):
    NONE = 0
    STOP_REQUESTED = 1  # stop() called or external stop signal set
    STOP_KEY = 2  # a sink (display) reported a stop key
    END_OF_STREAM = 3  # InputExhausted
    INVALID_INPUT = 4  # InvalidInput
    ERROR = 5  # any other pipeline error


@dataclass
class PipelineReport:
    frames_captured: int = 0  # frames read from the source, discarded ones included
    frames_decoded: int = 0
    frames_emitted: int = 0
    frames_timed_out: int = 0
    stop_reason: StopReason = StopReason.NONE
    error: Optional[Exception] = None
    decoded_frame_ids: list = field(default_factory=list)  # 1-based ids of the captured frames that were decoded

    def to_json(self):
        return dumps(
            {
                "frames_captured": self.frames_captured,
                "frames_decoded": self.frames_decoded,
                "frames_emitted": self.frames_emitted,
                "frames_timed_out": self.frames_timed_out,
                "stop_reason": self.stop_reason,
                "error": repr(self.error) if self.error is not None else None,
            }
        )


class FramePipeline:
    """
    Synchronous capture -> decode -> render -> emit loop.

    One frame is in flight at a time: a frame is fully decoded, colorized, composited and
    emitted before the next one is requested. With a frame stride N, N-1 captured frames are
    discarded before the N-th is decoded.
    The loop stops on a stop request (polled between iterations, an in-progress frame is never
    interrupted), on a stop key reported by a sink, on end of stream (InputExhausted) or on a
    malformed inference result (InvalidInput). All resources are released when the pipeline
    reaches the STOPPED state.
    """

    def __init__(
        self,
        frame_source,
        segmentation,
        label_table,
        sinks=None,
        frame_stride=None,
        processing_size=None,
        compositor: Compositor = None,
        inference_timeout=None,
        stop_signal: threading.Event = None,
    ):
        self.frame_source = frame_source
        self.segmentation = segmentation
        self.label_table = label_table
        self.sinks = list(sinks) if sinks is not None else []
        self.frame_stride = frame_stride if frame_stride is not None else Parameters.kFrameStride
        if int(self.frame_stride) < 1:
            raise ValueError(f"frame stride must be >= 1, got {self.frame_stride}")
        self.frame_stride = int(self.frame_stride)
        self.processing_size = (
            tuple(processing_size)
            if processing_size is not None
            else (Parameters.kProcessingWidth, Parameters.kProcessingHeight)
        )  # (width, height)
        self.inference_timeout = (
            inference_timeout if inference_timeout is not None else Parameters.kInferenceTimeout
        )

        self.decoder = ScoreDecoder(num_labels=label_table.size())
        self.colorizer = Colorizer(label_table, bgr=True)  # frames are BGR (OpenCV)
        self.compositor = compositor if compositor is not None else Compositor(label_table)

        self._infer = segmentation.infer_scores if hasattr(segmentation, "infer_scores") else segmentation
        self.backend_name = segmentation.backend_name() if hasattr(segmentation, "backend_name") else None

        self.stop_signal = stop_signal if stop_signal is not None else threading.Event()
        self.executor = None
        self.pending_inference = None  # timed out call still running on the inference worker
        if self.inference_timeout is not None:
            self.executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="inference")

        self.state = PipelineState.IDLE
        self.state_history = [PipelineState.IDLE] if Parameters.kPipelineTrackStates else None
        self.report = PipelineReport()
        self.last_frame = None  # last emitted composite frame
        self.timer_fps = TimerFps("FramePipeline", is_verbose=kTimerVerbose)

        self.logger = None
        if Parameters.kPipelineDebugAndPrintToFile:
            self.logger = Logging.setup_file_logger(
                "frame_pipeline_logger", Parameters.kLogsFolder + "/frame_pipeline.log"
            )

    def _set_state(self, state):
        self.state = state
        if self.state_history is not None:
            self.state_history.append(state)

    def _log(self, message):
        if self.logger is not None:
            self.logger.info(message)

    def stop(self):
        self.stop_signal.set()

    def is_stopped(self):
        return self.state == PipelineState.STOPPED

    # read frame_stride frames from the source and return the last one
    def capture(self):
        self._set_state(PipelineState.CAPTURING)
        frame = None
        for _ in range(self.frame_stride):
            frame = self.frame_source.read_frame()
            if frame is EndOfStream or frame is None:
                raise InputExhausted("Video camera is disconnected!")
            self.report.frames_captured += 1
        return resize_img(to_color_img(frame), self.processing_size)

    def infer(self, frame):
        """
        Run inference, blocking or bounded by inference_timeout.
        With a bounded wait, inference runs on a single worker and at most one call is in flight:
        while a timed out call is still running, the next frames wait for it (up to the same
        timeout) and are dropped if it has not completed. Its late result is discarded.
        The worker cannot be interrupted: a call that never returns still blocks interpreter exit.
        """
        if self.executor is None:
            return self._infer(frame)
        if self.pending_inference is not None:
            wait([self.pending_inference], timeout=self.inference_timeout)
            if not self.pending_inference.done():
                raise InferenceTimeout(self.inference_timeout)
            self.pending_inference = None
        future = self.executor.submit(self._infer, frame)
        try:
            return future.result(timeout=self.inference_timeout)
        except FutureTimeoutError:
            self.pending_inference = future
            raise InferenceTimeout(self.inference_timeout)

    def decode(self, frame):
        self._set_state(PipelineState.DECODING)
        timer = Timer()
        scores = self.infer(frame)
        elapsed = timer.elapsed()
        label_mask = self.decoder.decode(scores)
        height, width = frame.shape[:2]
        if label_mask.shape != (height, width):
            # the network output resolution may differ from the input one
            label_mask = cv2.resize(label_mask, (width, height), interpolation=cv2.INTER_NEAREST)
        self.report.frames_decoded += 1
        self.report.decoded_frame_ids.append(self.report.frames_captured)
        return label_mask, elapsed

    def render(self, frame, label_mask, elapsed):
        self._set_state(PipelineState.RENDERING)
        color_mask, active_labels = self.colorizer.colorize(label_mask)
        height, width = frame.shape[:2]
        diagnostics = Diagnostics(
            elapsed_seconds=elapsed,
            backend_name=self.backend_name,
            width=width,
            height=height,
        )
        return self.compositor.composite(frame, color_mask, active_labels, diagnostics, self.label_table)

    # returns True if a sink asked to stop
    def emit(self, composite_frame):
        stop = False
        for sink in self.sinks:
            stop = bool(sink.emit(composite_frame)) or stop
        self.last_frame = composite_frame
        self.report.frames_emitted += 1
        self._set_state(PipelineState.EMITTED)
        return stop

    def step(self):
        """
        Run one full iteration. Returns False when the loop must terminate.
        InferenceTimeout drops the current frame, other pipeline errors propagate.
        """
        frame = self.capture()
        try:
            label_mask, elapsed = self.decode(frame)
        except InferenceTimeout as e:
            self.report.frames_timed_out += 1
            Printer.orange(f"FramePipeline: frame {self.report.frames_captured} dropped: {e}")
            self._log(f"frame {self.report.frames_captured}: dropped ({e})")
            return True
        composite_frame = self.render(frame, label_mask, elapsed)
        stop = self.emit(composite_frame)
        self._log(f"frame {self.report.frames_captured}: inference {elapsed:.4f} s")
        self.timer_fps.refresh()
        if stop:
            self.report.stop_reason = StopReason.STOP_KEY
            return False
        return True

    def run(self) -> PipelineReport:
        try:
            while True:
                if self.stop_signal.is_set():
                    self.report.stop_reason = StopReason.STOP_REQUESTED
                    break
                if not self.step():
                    break
        except InputExhausted as e:
            self._terminate(StopReason.END_OF_STREAM, e)
        except InvalidInput as e:
            self._terminate(StopReason.INVALID_INPUT, e)
        except PipelineError as e:
            self._terminate(StopReason.ERROR, e)
        finally:
            self.release()
        if kVerbose:
            Printer.green(
                f"FramePipeline: stopped ({self.report.stop_reason}), "
                f"captured: {self.report.frames_captured}, decoded: {self.report.frames_decoded}, "
                f"emitted: {self.report.frames_emitted}"
            )
        return self.report

    def _terminate(self, stop_reason, error):
        self.report.stop_reason = stop_reason
        self.report.error = error
        Printer.red(f"FramePipeline: {type(error).__name__}: {error}")
        self._log(f"terminated: {type(error).__name__}: {error}")

    def release(self):
        if self.state == PipelineState.STOPPED:
            return
        self.frame_source.release()
        for sink in self.sinks:
            sink.release()
        if self.executor is not None:
            self.executor.shutdown(wait=False, cancel_futures=True)
            self.executor = None
            self.pending_inference = None
        if hasattr(self.segmentation, "release"):
            self.segmentation.release()
        if self.logger is not None:
            Logging.close_logger(self.logger)
            self.logger = None
        self._set_state(PipelineState.STOPPED)
