"""
Sparse population-code encoder for continuous sensory input.

Each cell of a two-channel sensory frame owns a ``dots_height x dots_width``
sub-grid of boolean dots. Channel 0 picks a horizontal position inside the
sub-grid and channel 1 a vertical one, by mapping [-1, 1] linearly onto the
dot indices. A square blob of radius ``blob_radius`` is switched on around that
position and clipped at the sub-grid boundary, so a cell never writes into its
neighbours' dots.
"""

import numpy as np

from corticalq.errors import ERROR_SENSORY_FRAME_SHAPE, ShapeMismatchError

DEFAULT_BLOB_RADIUS = 1
NUM_CHANNELS = 2


class SparseInputEncoder:
    """Encode a ``(2, height, width)`` sensory frame into a boolean dot grid."""

    def __init__(
        self,
        width: int,
        height: int,
        dots_width: int,
        dots_height: int,
        blob_radius: int = DEFAULT_BLOB_RADIUS,
    ) -> None:
        self.width = width
        self.height = height
        self.dots_width = dots_width
        self.dots_height = dots_height
        self.blob_radius = blob_radius

    @property
    def frame_shape(self) -> tuple[int, int, int]:
        """Shape of the sensory frames this encoder accepts."""
        return (NUM_CHANNELS, self.height, self.width)

    @property
    def output_shape(self) -> tuple[int, int]:
        """Shape ``(rows, columns)`` of the produced dot grid."""
        return (self.height * self.dots_height, self.width * self.dots_width)

    def dot_position(self, value: float, dots: int) -> int:
        """Map ``value`` linearly to a dot index, truncating towards zero.

        -1 maps to 0 and +1 to ``dots``, one past the last dot. The index is not
        clamped: a blob centred outside the sub-grid keeps only the part that
        overlaps it.
        """
        return int((value * 0.5 + 0.5) * dots)

    def encode(self, frame: np.ndarray) -> np.ndarray:
        """Encode ``frame`` into a fresh dot grid."""
        frame = np.asarray(frame, dtype=np.float64)
        if frame.shape != self.frame_shape:
            error_message = ERROR_SENSORY_FRAME_SHAPE.format(
                expected=self.frame_shape,
                actual=frame.shape,
            )
            raise ShapeMismatchError(error_message)

        dots = np.zeros(self.output_shape, dtype=bool)
        r = self.blob_radius

        for y in range(self.height):
            for x in range(self.width):
                dot_x = self.dot_position(frame[0, y, x], self.dots_width)
                dot_y = self.dot_position(frame[1, y, x], self.dots_height)

                x_lo = max(dot_x - r, 0)
                x_hi = min(dot_x + r + 1, self.dots_width)
                y_lo = max(dot_y - r, 0)
                y_hi = min(dot_y + r + 1, self.dots_height)
                if x_lo >= x_hi or y_lo >= y_hi:
                    continue

                base_x = x * self.dots_width
                base_y = y * self.dots_height
                dots[base_y + y_lo : base_y + y_hi, base_x + x_lo : base_x + x_hi] = True

        return dots
