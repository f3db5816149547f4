import os
import tempfile
import unittest
from unittest import mock

import numpy as np

import main_semantic_video_segmentation as app
from pysegviz.config import Config
from pysegviz.errors import ConfigurationError
from pysegviz.io.frame_source import ListFrameSource
from pysegviz.pipeline.frame_pipeline import FramePipeline
from pysegviz.semantics.semantic_labels import kDefaultLabelFile


kSize = 64

kConfigText = f"""
SEGMENTATION:
  type: FCN8S
  label_file: {kDefaultLabelFile}
  use_cuda: False
  frame_stride: 1
  width: {kSize}
  height: {kSize}
VISUALIZATION:
  display: False
"""


class FakeSegmentation:
    def __init__(self, num_classes=21, valid_scores=True):
        self._num_classes = num_classes
        self.valid_scores = valid_scores
        self.is_released = False

    def num_classes(self):
        return self._num_classes

    def infer_scores(self, frame):
        if not self.valid_scores:
            return np.zeros((kSize, kSize), dtype=np.float32)
        return np.zeros((1, self._num_classes, kSize, kSize), dtype=np.float32)

    def backend_name(self):
        return "CPU"

    def release(self):
        self.is_released = True


class TestMain(unittest.TestCase):

    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.config_path = os.path.join(self.tmp_dir.name, "config.yaml")
        with open(self.config_path, "w") as f:
            f.write(kConfigText)
        self.source = ListFrameSource([np.zeros((kSize, kSize, 3), dtype=np.uint8) for _ in range(3)])
        self.segmentation = FakeSegmentation()

    def tearDown(self):
        self.tmp_dir.cleanup()

    def run_main(self, argv):
        with mock.patch.object(app, "VideoFrameSource", return_value=self.source) as source_cls, mock.patch.object(
            app, "semantic_segmentation_factory", return_value=self.segmentation
        ) as factory:
            status = app.main(["--config", self.config_path] + argv)
        self.source_cls = source_cls
        self.factory = factory
        return status

    def test_video_file_end_of_stream(self):
        self.assertEqual(self.run_main(["-i", "video.avi"]), 0)
        self.source_cls.assert_called_once_with("video.avi")
        self.assertTrue(self.source.is_released)
        self.assertTrue(self.segmentation.is_released)

    def test_camera_end_of_stream(self):
        # a live camera that stops delivering frames is a disconnection
        self.assertEqual(self.run_main([]), 1)
        self.source_cls.assert_called_once_with("")

    def test_invalid_scores(self):
        self.segmentation = FakeSegmentation(valid_scores=False)
        self.assertEqual(self.run_main(["-i", "video.avi"]), 1)
        self.assertTrue(self.source.is_released)

    def test_missing_config(self):
        status = app.main(["--config", os.path.join(self.tmp_dir.name, "missing.yaml")])
        self.assertEqual(status, 1)

    def test_model_with_more_classes_than_labels(self):
        self.segmentation = FakeSegmentation(num_classes=30)
        self.assertEqual(self.run_main(["-i", "video.avi"]), 1)
        # the source opened before the check is released
        self.assertTrue(self.source.is_released)

    def test_command_line_overrides_config(self):
        self.run_main(["-i", "video.avi", "-c", "true", "--model", "DEEPLABV3"])
        args, kwargs = self.factory.call_args
        self.assertEqual(args[0], "DEEPLABV3")
        self.assertTrue(kwargs["use_cuda"])


class TestBuildPipeline(unittest.TestCase):

    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.config_path = os.path.join(self.tmp_dir.name, "config.yaml")
        with open(self.config_path, "w") as f:
            f.write(kConfigText)
        self.config = Config(self.config_path)

    def tearDown(self):
        self.tmp_dir.cleanup()

    def test_build(self):
        args = app.build_arg_parser().parse_args(["-i", "video.avi", "-f", "2"])
        source = ListFrameSource([])
        with mock.patch.object(app, "VideoFrameSource", return_value=source), mock.patch.object(
            app, "semantic_segmentation_factory", return_value=FakeSegmentation()
        ):
            pipeline = app.build_pipeline(args, self.config)
        self.assertIsInstance(pipeline, FramePipeline)
        self.assertEqual(pipeline.frame_stride, 2)
        self.assertEqual(pipeline.processing_size, (kSize, kSize))
        self.assertEqual(pipeline.sinks, [])
        self.assertEqual(pipeline.label_table.size(), 21)
        pipeline.release()

    def test_invalid_frame_stride(self):
        args = app.build_arg_parser().parse_args(["-f", "0"])
        with self.assertRaises(ConfigurationError):
            app.build_pipeline(args, self.config)

    def test_model_with_more_classes_than_labels(self):
        args = app.build_arg_parser().parse_args(["-i", "video.avi"])
        source = ListFrameSource([])
        with mock.patch.object(app, "VideoFrameSource", return_value=source), mock.patch.object(
            app, "semantic_segmentation_factory", return_value=FakeSegmentation(num_classes=22)
        ):
            with self.assertRaises(ConfigurationError):
                app.build_pipeline(args, self.config)
        self.assertTrue(source.is_released)


if __name__ == "__main__":
    unittest.main()
