import threading
import unittest

import numpy as np

from pysegviz.config_parameters import Parameters
from pysegviz.errors import InputExhausted, InvalidInput
from pysegviz.io.frame_sink import FrameSink
from pysegviz.io.frame_source import ListFrameSource
from pysegviz.pipeline.frame_pipeline import FramePipeline, PipelineState, StopReason
from pysegviz.semantics.semantic_labels import load_label_table


kSize = 64  # frames are kSize x kSize, no resize happens in the pipeline


def make_frames(num_frames):
    # frame i is filled with the value i (1-based)
    return [np.full((kSize, kSize, 3), i + 1, dtype=np.uint8) for i in range(num_frames)]


class FakeSegmentation:
    def __init__(self, num_classes=2):
        self.num_classes = num_classes
        self.seen_values = []
        self.is_released = False

    def infer_scores(self, frame):
        self.seen_values.append(int(frame[0, 0, 0]))
        scores = np.zeros((1, self.num_classes, frame.shape[0], frame.shape[1]), dtype=np.float32)
        scores[0, 1, : frame.shape[0] // 2] = 1.0  # top half is label 1
        return scores

    def backend_name(self):
        return "CPU"

    def release(self):
        self.is_released = True


class RecordingSink(FrameSink):
    def __init__(self, stop_after=None):
        self.frames = []
        self.stop_after = stop_after
        self.is_released = False

    def emit(self, frame):
        self.frames.append(frame)
        return self.stop_after is not None and len(self.frames) >= self.stop_after

    def release(self):
        self.is_released = True


class TestFramePipeline(unittest.TestCase):

    def setUp(self):
        self.table = load_label_table(["background 0 0 0", "cat 128 0 0"])

    def make_pipeline(self, num_frames, segmentation=None, sink=None, **kwargs):
        self.source = ListFrameSource(make_frames(num_frames))
        self.segmentation = segmentation if segmentation is not None else FakeSegmentation()
        self.sink = sink if sink is not None else RecordingSink()
        return FramePipeline(
            self.source,
            self.segmentation,
            self.table,
            sinks=[self.sink],
            processing_size=(kSize, kSize),
            **kwargs,
        )

    def test_runs_until_end_of_stream(self):
        pipeline = self.make_pipeline(3)
        report = pipeline.run()
        self.assertEqual(report.stop_reason, StopReason.END_OF_STREAM)
        self.assertIsInstance(report.error, InputExhausted)
        self.assertEqual(report.frames_captured, 3)
        self.assertEqual(report.frames_decoded, 3)
        self.assertEqual(report.frames_emitted, 3)
        self.assertEqual(len(self.sink.frames), 3)
        self.assertEqual(self.sink.frames[0].shape, (kSize, kSize, 3))
        self.assertEqual(pipeline.state, PipelineState.STOPPED)
        self.assertTrue(self.source.is_released)
        self.assertTrue(self.sink.is_released)
        self.assertTrue(self.segmentation.is_released)

    def test_frame_stride(self):
        pipeline = self.make_pipeline(9, frame_stride=3)
        report = pipeline.run()
        self.assertEqual(self.segmentation.seen_values, [3, 6, 9])
        self.assertEqual(report.decoded_frame_ids, [3, 6, 9])
        self.assertEqual(report.frames_captured, 9)
        self.assertEqual(report.frames_emitted, 3)

    def test_frame_stride_partial_tail(self):
        pipeline = self.make_pipeline(7, frame_stride=3)
        report = pipeline.run()
        self.assertEqual(report.decoded_frame_ids, [3, 6])
        self.assertEqual(report.stop_reason, StopReason.END_OF_STREAM)

    def test_invalid_frame_stride(self):
        with self.assertRaises(ValueError):
            self.make_pipeline(3, frame_stride=0)

    def test_stop_key(self):
        pipeline = self.make_pipeline(10, sink=RecordingSink(stop_after=2))
        report = pipeline.run()
        self.assertEqual(report.stop_reason, StopReason.STOP_KEY)
        self.assertEqual(report.frames_emitted, 2)
        self.assertIsNone(report.error)
        self.assertTrue(self.source.is_released)

    def test_stop_requested_before_start(self):
        stop_signal = threading.Event()
        stop_signal.set()
        pipeline = self.make_pipeline(5, stop_signal=stop_signal)
        report = pipeline.run()
        self.assertEqual(report.stop_reason, StopReason.STOP_REQUESTED)
        self.assertEqual(report.frames_captured, 0)
        self.assertEqual(self.sink.frames, [])
        self.assertTrue(pipeline.is_stopped())

    def test_stop_during_run(self):
        pipeline = None

        class StoppingSink(RecordingSink):
            def emit(self, frame):
                super().emit(frame)
                pipeline.stop()
                return False

        pipeline = self.make_pipeline(5, sink=StoppingSink())
        report = pipeline.run()
        self.assertEqual(report.stop_reason, StopReason.STOP_REQUESTED)
        self.assertEqual(report.frames_emitted, 1)
        self.assertEqual(report.frames_captured, 1)

    def test_state_history(self):
        saved = Parameters.kPipelineTrackStates
        Parameters.kPipelineTrackStates = True
        try:
            pipeline = self.make_pipeline(1)
        finally:
            Parameters.kPipelineTrackStates = saved
        pipeline.run()
        self.assertEqual(
            pipeline.state_history,
            [
                PipelineState.IDLE,
                PipelineState.CAPTURING,
                PipelineState.DECODING,
                PipelineState.RENDERING,
                PipelineState.EMITTED,
                PipelineState.CAPTURING,
                PipelineState.STOPPED,
            ],
        )

    def test_invalid_scores(self):
        class BadSegmentation(FakeSegmentation):
            def infer_scores(self, frame):
                return np.zeros((kSize, kSize), dtype=np.float32)

        pipeline = self.make_pipeline(3, segmentation=BadSegmentation())
        report = pipeline.run()
        self.assertEqual(report.stop_reason, StopReason.INVALID_INPUT)
        self.assertIsInstance(report.error, InvalidInput)
        self.assertEqual(report.frames_emitted, 0)
        self.assertTrue(self.source.is_released)

    def test_composite_colors_the_detected_label(self):
        pipeline = self.make_pipeline(1)
        pipeline.run()
        frame = self.sink.frames[0]
        # BGR color of "cat" (128, 0, 0) blended over a frame of value 1, checked away from the overlay text
        expected = np.array([0.3 * 1 + 0.7 * 0, 0.3 * 1 + 0.7 * 0, 0.3 * 1 + 0.7 * 128])
        self.assertTrue(np.allclose(frame[28, kSize // 2], np.rint(expected), atol=1))
        self.assertEqual(tuple(frame[36, kSize // 2]), (0, 0, 0))

    def test_inference_timeout_keeps_one_call_in_flight(self):
        release_event = threading.Event()
        finished_event = threading.Event()

        class SlowFirstSegmentation(FakeSegmentation):
            def __init__(self):
                super().__init__()
                self.lock = threading.Lock()
                self.in_flight = 0
                self.max_in_flight = 0
                self.num_calls = 0

            def infer_scores(self, frame):
                with self.lock:
                    self.in_flight += 1
                    self.max_in_flight = max(self.max_in_flight, self.in_flight)
                    self.num_calls += 1
                    is_first_call = self.num_calls == 1
                try:
                    if is_first_call:
                        release_event.wait(5.0)
                    return super().infer_scores(frame)
                finally:
                    with self.lock:
                        self.in_flight -= 1
                    if is_first_call:
                        finished_event.set()

        # the stalled first call completes while the third frame is read
        class UnblockingSource(ListFrameSource):
            def read_frame(self):
                if self._idx == 2:
                    release_event.set()
                    finished_event.wait(5.0)
                return super().read_frame()

        segmentation = SlowFirstSegmentation()
        self.source = UnblockingSource(make_frames(4))
        self.sink = RecordingSink()
        pipeline = FramePipeline(
            self.source,
            segmentation,
            self.table,
            sinks=[self.sink],
            processing_size=(kSize, kSize),
            inference_timeout=0.1,
        )
        try:
            report = pipeline.run()
        finally:
            release_event.set()
        self.assertEqual(segmentation.max_in_flight, 1)
        # frame 1 timed out, frame 2 was dropped while frame 1 was still running
        self.assertEqual(segmentation.num_calls, 3)
        self.assertEqual(report.frames_timed_out, 2)
        self.assertEqual(report.decoded_frame_ids, [3, 4])
        self.assertEqual(report.frames_emitted, 2)
        self.assertEqual(report.stop_reason, StopReason.END_OF_STREAM)

    def test_plain_callable_segmentation(self):
        segmentation = FakeSegmentation()
        self.source = ListFrameSource(make_frames(2))
        pipeline = FramePipeline(self.source, segmentation.infer_scores, self.table, processing_size=(kSize, kSize))
        report = pipeline.run()
        self.assertEqual(report.frames_emitted, 2)
        self.assertIsNotNone(pipeline.last_frame)

    def test_release_is_idempotent(self):
        pipeline = self.make_pipeline(2)
        pipeline.run()
        pipeline.release()
        self.assertEqual(pipeline.state, PipelineState.STOPPED)

    def test_report_to_json(self):
        pipeline = self.make_pipeline(2)
        report = pipeline.run()
        text = report.to_json()
        self.assertIn("frames_emitted", text)
        self.assertIn("END_OF_STREAM", text)


if __name__ == "__main__":
    unittest.main()
