import unittest

import numpy as np

from pysegviz.errors import InvalidInput
from pysegviz.semantics.score_decoder import ScoreDecoder, ScoreVolume


class TestScoreDecoder(unittest.TestCase):

    def setUp(self):
        self.decoder = ScoreDecoder()

    def test_tie_resolves_to_first_channel(self):
        scores = np.array([0.4, 0.4], dtype=np.float32).reshape(2, 1, 1)
        self.assertEqual(self.decoder.decode(scores)[0, 0], 0)

    def test_max_channel_wins(self):
        scores = np.array([0.3, 0.7], dtype=np.float32).reshape(2, 1, 1)
        self.assertEqual(self.decoder.decode(scores)[0, 0], 1)

    def test_later_ties_keep_first_max(self):
        scores = np.array([0.1, 0.9, 0.2, 0.9], dtype=np.float32).reshape(4, 1, 1)
        self.assertEqual(self.decoder.decode(scores)[0, 0], 1)

    def test_uniform_volume_is_background(self):
        mask = self.decoder.decode(np.zeros((5, 4, 3), dtype=np.float32))
        self.assertEqual(mask.shape, (4, 3))
        self.assertEqual(mask.dtype, np.uint8)
        self.assertFalse(mask.any())
        mask = self.decoder.decode(np.full((5, 4, 3), -2.5, dtype=np.float32))
        self.assertFalse(mask.any())

    def test_matches_argmax(self):
        rng = np.random.default_rng(0)
        # quantized scores produce many ties
        scores = rng.integers(0, 4, size=(21, 17, 13)).astype(np.float32)
        mask = self.decoder.decode(scores)
        # np.argmax also returns the first occurrence of the maximum
        self.assertTrue(np.array_equal(mask, np.argmax(scores, axis=0).astype(np.uint8)))

    def test_negative_scores(self):
        scores = np.array([-3.0, -1.0, -2.0], dtype=np.float32).reshape(3, 1, 1)
        self.assertEqual(self.decoder.decode(scores)[0, 0], 1)

    def test_batch_axis_is_squeezed(self):
        scores = np.zeros((1, 3, 2, 2), dtype=np.float32)
        scores[0, 2, 1, 1] = 1.0
        mask = self.decoder.decode(scores)
        self.assertEqual(mask.shape, (2, 2))
        self.assertEqual(mask[1, 1], 2)
        self.assertEqual(mask[0, 0], 0)

    def test_invalid_shapes(self):
        with self.assertRaises(InvalidInput):
            self.decoder.decode(np.zeros((0, 4, 4), dtype=np.float32))
        with self.assertRaises(InvalidInput):
            self.decoder.decode(np.zeros((4, 4), dtype=np.float32))
        with self.assertRaises(InvalidInput):
            self.decoder.decode(np.zeros((2, 3, 4, 4), dtype=np.float32))
        with self.assertRaises(InvalidInput):
            self.decoder.decode(np.zeros((257, 1, 1), dtype=np.float32))

    def test_more_channels_than_labels(self):
        decoder = ScoreDecoder(num_labels=2)
        with self.assertRaises(InvalidInput):
            decoder.decode(np.zeros((3, 2, 2), dtype=np.float32))
        self.assertEqual(decoder.decode(np.zeros((2, 2, 2), dtype=np.float32)).shape, (2, 2))

    def test_input_is_not_modified(self):
        scores = np.random.default_rng(1).random((3, 4, 4)).astype(np.float32)
        copy = scores.copy()
        self.decoder.decode(scores)
        self.assertTrue(np.array_equal(scores, copy))


class TestScoreVolume(unittest.TestCase):

    def test_view(self):
        scores = np.arange(2 * 3 * 4, dtype=np.float32).reshape(2, 3, 4)
        volume = ScoreVolume(scores)
        self.assertEqual((volume.num_classes, volume.height, volume.width), (2, 3, 4))
        self.assertEqual(volume.value(1, 2, 3), scores[1, 2, 3])
        self.assertTrue(np.array_equal(volume.channel(1), scores[1]))

    def test_bounds_checked(self):
        volume = ScoreVolume(np.zeros((2, 3, 4), dtype=np.float32))
        with self.assertRaises(IndexError):
            volume.value(2, 0, 0)
        with self.assertRaises(IndexError):
            volume.value(0, -1, 0)
        with self.assertRaises(IndexError):
            volume.value(0, 0, 4)
        with self.assertRaises(IndexError):
            volume.channel(5)

    def test_read_only(self):
        volume = ScoreVolume(np.zeros((2, 3, 4), dtype=np.float32))
        with self.assertRaises(ValueError):
            volume.channel(0)[0, 0] = 1.0


if __name__ == "__main__":
    unittest.main()
