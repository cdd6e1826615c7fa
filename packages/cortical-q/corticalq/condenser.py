"""Block-average a boolean feature grid into the agent's dense state vector."""

import math

import numpy as np


class Condenser:
    """
    Condense a ``(rows, columns)`` boolean grid by averaging fixed-size blocks.

    Edge blocks that hang over the grid are padded with absent cells but still
    divided by the full block area, so they can never reach 1.0.
    """

    def __init__(self, grid_shape: tuple[int, int], block_width: int, block_height: int) -> None:
        self.grid_shape = grid_shape
        self.block_width = block_width
        self.block_height = block_height

        rows, columns = grid_shape
        self.buffer_width = math.ceil(columns / block_width)
        self.buffer_height = math.ceil(rows / block_height)

    @property
    def state_size(self) -> int:
        """Length of the produced state vector."""
        return self.buffer_width * self.buffer_height

    def condense(self, grid: np.ndarray) -> np.ndarray:
        """Return the row-major block fractions of ``grid`` as a float vector."""
        rows, columns = self.grid_shape
        padded = np.zeros(
            (self.buffer_height * self.block_height, self.buffer_width * self.block_width),
            dtype=np.float64,
        )
        padded[:rows, :columns] = np.asarray(grid, dtype=bool)

        blocks = padded.reshape(
            self.buffer_height,
            self.block_height,
            self.buffer_width,
            self.block_width,
        )
        sums = blocks.sum(axis=(1, 3))
        return (sums / (self.block_width * self.block_height)).ravel()
