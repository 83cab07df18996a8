"""Shared test fixtures."""

from __future__ import annotations

from collections import deque
from typing import Callable, List, Tuple

import numpy as np
import pytest

Neighbor = Tuple[int, int]

NEIGHBORS: List[Neighbor] = [
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
]


def flood_fill_labels(binary_image: np.ndarray) -> Tuple[np.ndarray, int]:
    """Breadth-first 8-connected labeling used as ground truth."""
    height, width = binary_image.shape
    labels = np.zeros((height, width), dtype=np.int32)
    mask = binary_image > 0
    label_id = 0

    for y in range(height):
        for x in range(width):
            if not mask[y, x] or labels[y, x] != 0:
                continue

            label_id += 1
            queue: deque[Tuple[int, int]] = deque()
            queue.append((y, x))
            labels[y, x] = label_id

            while queue:
                cy, cx = queue.popleft()
                for dy, dx in NEIGHBORS:
                    ny = cy + dy
                    nx = cx + dx
                    if ny < 0 or ny >= height or nx < 0 or nx >= width:
                        continue
                    if not mask[ny, nx] or labels[ny, nx] != 0:
                        continue
                    labels[ny, nx] = label_id
                    queue.append((ny, nx))

    return labels, label_id


@pytest.fixture
def reference_labels() -> Callable[[np.ndarray], Tuple[np.ndarray, int]]:
    return flood_fill_labels


@pytest.fixture
def square_image() -> np.ndarray:
    """10x10 background with a 3x3 block at rows 2..4, cols 3..5."""
    image = np.zeros((10, 10), dtype=np.uint8)
    image[2:5, 3:6] = 255
    return image


@pytest.fixture
def corner_touching_image() -> np.ndarray:
    """Two 2x2 blocks that meet only diagonally at one corner."""
    image = np.zeros((6, 6), dtype=np.uint8)
    image[0:2, 0:2] = 255
    image[2:4, 2:4] = 255
    return image


@pytest.fixture
def u_shape_image() -> np.ndarray:
    """Two vertical arms joined at the bottom row."""
    image = np.zeros((5, 7), dtype=np.uint8)
    image[0:5, 1] = 255
    image[0:5, 5] = 255
    image[4, 1:6] = 255
    return image


def random_binary_image(seed: int, shape: Tuple[int, int] = (16, 20), density: float = 0.4) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return np.where(rng.random(shape) < density, 255, 0).astype(np.uint8)


@pytest.fixture
def random_image() -> Callable[..., np.ndarray]:
    return random_binary_image
