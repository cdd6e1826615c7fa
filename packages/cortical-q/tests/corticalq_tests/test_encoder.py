"""Tests for the sparse population-code encoder."""

import numpy as np
import pytest
from corticalq.encoder import SparseInputEncoder
from corticalq.errors import ShapeMismatchError


def subgrid(dots: np.ndarray, x: int, y: int, size: int) -> np.ndarray:
    """Return the dot sub-grid owned by cell ``(x, y)``."""
    return dots[y * size : (y + 1) * size, x * size : (x + 1) * size]


class TestSparseInputEncoder:
    """Test cases for SparseInputEncoder."""

    def test_output_shape(self):
        """Test that the dot grid scales the input grid by the dots per cell."""
        encoder = SparseInputEncoder(width=4, height=3, dots_width=5, dots_height=2)
        dots = encoder.encode(np.zeros((2, 3, 4)))

        assert encoder.output_shape == (6, 20)
        assert dots.shape == (6, 20)
        assert dots.dtype == bool

    def test_centred_blob(self):
        """Test that a zero input draws a full (2R+1)^2 blob in the cell centre."""
        encoder = SparseInputEncoder(width=1, height=1, dots_width=5, dots_height=5, blob_radius=1)
        dots = encoder.encode(np.zeros((2, 1, 1)))

        expected = np.zeros((5, 5), dtype=bool)
        expected[1:4, 1:4] = True
        np.testing.assert_array_equal(dots, expected)

    def test_larger_radius_is_clipped_to_cell(self):
        """Test that a blob wider than the cell fills the cell without spilling."""
        encoder = SparseInputEncoder(width=2, height=1, dots_width=3, dots_height=3, blob_radius=2)
        frame = np.zeros((2, 1, 2))
        frame[:, 0, 1] = -1.0
        dots = encoder.encode(frame)

        assert subgrid(dots, 0, 0, 3).all()
        # centred on dot (0, 0), the 5x5 blob still covers only this cell
        assert subgrid(dots, 1, 0, 3).sum() == 9

    def test_blob_clipped_at_outer_corners(self):
        """Test clipping for the four corner cells of the sensory grid."""
        encoder = SparseInputEncoder(width=3, height=3, dots_width=5, dots_height=5, blob_radius=1)
        frame = np.zeros((2, 3, 3))
        # (x, y) -> (channel 0, channel 1)
        corners = {
            (0, 0): (-1.0, -1.0),
            (2, 0): (1.0, -1.0),
            (0, 2): (-1.0, 1.0),
            (2, 2): (1.0, 1.0),
        }
        for (x, y), (horizontal, vertical) in corners.items():
            frame[0, y, x] = horizontal
            frame[1, y, x] = vertical

        dots = encoder.encode(frame)

        # -1 centres the blob on dot 0, +1 one dot past the end of the cell
        expected_corner = {
            (0, 0): (slice(0, 2), slice(0, 2)),
            (2, 0): (slice(0, 2), slice(4, 5)),
            (0, 2): (slice(4, 5), slice(0, 2)),
            (2, 2): (slice(4, 5), slice(4, 5)),
        }
        for (x, y), (rows, cols) in expected_corner.items():
            cell = subgrid(dots, x, y, 5)
            expected = np.zeros((5, 5), dtype=bool)
            expected[rows, cols] = True
            np.testing.assert_array_equal(cell, expected)

        assert dots.sum() == 4 + 2 + 2 + 1 + 5 * 9

    def test_positive_one_keeps_only_last_dot(self):
        """Test that +1 in both channels lights only the last dot of the cell."""
        encoder = SparseInputEncoder(width=1, height=1, dots_width=5, dots_height=5, blob_radius=1)

        dots = encoder.encode(np.ones((2, 1, 1)))

        expected = np.zeros((5, 5), dtype=bool)
        expected[4, 4] = True
        np.testing.assert_array_equal(dots, expected)

    def test_dot_position_is_not_clamped(self):
        """Test the unclamped, truncated mapping of values to dot indices."""
        encoder = SparseInputEncoder(width=1, height=1, dots_width=4, dots_height=4)

        assert encoder.dot_position(-1.0, 4) == 0
        assert encoder.dot_position(0.0, 4) == 2
        assert encoder.dot_position(1.0, 4) == 4
        assert encoder.dot_position(3.0, 4) == 8
        assert encoder.dot_position(-1.5, 4) == -1
        assert encoder.dot_position(-3.0, 4) == -4

    def test_out_of_range_values(self):
        """Test that blobs centred outside a cell are clipped or vanish."""
        encoder = SparseInputEncoder(width=3, height=1, dots_width=4, dots_height=4)
        frame = np.zeros((2, 1, 3))
        frame[:, 0, 0] = 3.0
        frame[:, 0, 1] = -3.0
        frame[0, 0, 2] = -1.5

        dots = encoder.encode(frame)

        assert not subgrid(dots, 0, 0, 4).any()
        assert not subgrid(dots, 1, 0, 4).any()
        # dot -1 keeps only column 0; the vertical centre 2 covers rows 1..3
        expected = np.zeros((4, 4), dtype=bool)
        expected[1:4, 0] = True
        np.testing.assert_array_equal(subgrid(dots, 2, 0, 4), expected)

    def test_zero_radius_single_dot(self):
        """Test that radius zero writes exactly one dot per cell."""
        encoder = SparseInputEncoder(width=3, height=2, dots_width=4, dots_height=4, blob_radius=0)
        rng = np.random.default_rng(0)
        dots = encoder.encode(rng.uniform(-1.0, 1.0, size=(2, 2, 3)))

        assert dots.sum() == 6
        for y in range(2):
            for x in range(3):
                assert subgrid(dots, x, y, 4).sum() == 1

    def test_encoding_is_deterministic(self):
        """Test that the same frame always encodes to the same dot grid."""
        encoder = SparseInputEncoder(width=3, height=3, dots_width=4, dots_height=4)
        frame = np.random.default_rng(5).uniform(-1.0, 1.0, size=(2, 3, 3))

        np.testing.assert_array_equal(encoder.encode(frame), encoder.encode(frame))

    def test_wrong_frame_shape(self):
        """Test that a frame of the wrong shape is rejected."""
        encoder = SparseInputEncoder(width=3, height=3, dots_width=4, dots_height=4)

        with pytest.raises(ShapeMismatchError, match="Sensory frame"):
            encoder.encode(np.zeros((3, 3)))
