"""
Connected component analysis for binary images.

Implements the two-pass labeling algorithm with a disjoint-set over
provisional labels, followed by moment-based blob measurements.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Tuple

import numpy as np

from blob_properties import ComponentProperty, component_properties, filter_blobs
from labeling_settings import blob_options, labeling_options

logger = logging.getLogger(__name__)

DEFAULT_MAX_COMPONENT = 4096


class PreconditionViolation(ValueError):
    """Raised when the input is not a single-channel 8-bit image."""


class LabelCapacityExceeded(RuntimeError):
    """Raised when pass 1 needs more provisional labels than allowed."""


class DisjointSet:
    """
    Fixed-capacity disjoint set over provisional labels.

    ``parent[i] == 0`` marks ``i`` as a root. ``resolved[root]`` holds the
    dense final id of a root once it has been seen by ``find``.
    """

    def __init__(self, capacity: int) -> None:
        self.parent = [0] * capacity
        self.resolved = [0] * capacity
        self.next_resolved = 1

    def root(self, a: int) -> int:
        while self.parent[a] > 0:
            a = self.parent[a]
        return a

    def union(self, a: int, b: int) -> None:
        """Merge the sets of ``a`` and ``b``; the smaller root wins."""
        ra, rb = self.root(a), self.root(b)
        if ra == rb:
            return
        if ra < rb:
            self.parent[rb] = ra
        else:
            self.parent[ra] = rb

    def find(self, a: int) -> int:
        """Return the dense id of ``a``'s set, assigning one on first sight."""
        r = self.root(a)
        if self.resolved[r] == 0:
            self.resolved[r] = self.next_resolved
            self.next_resolved += 1
        return self.resolved[r]


def _neighbor_labels(labels: np.ndarray, y: int, x: int, width: int) -> List[int]:
    """
    Labels of the already visited 8-neighbors of (y, x).

        | 2 | 3 | 4 |
        | 1 | 0 |   |

    Pixels right of and below (y, x) have not been scanned yet.
    """
    found = set()
    if y > 0:
        prev = labels[y - 1]
        if prev[x] != 0:
            found.add(int(prev[x]))
        if x > 0 and prev[x - 1] != 0:
            found.add(int(prev[x - 1]))
        if x < width - 1 and prev[x + 1] != 0:
            found.add(int(prev[x + 1]))
    if x > 0 and labels[y, x - 1] != 0:
        found.add(int(labels[y, x - 1]))
    return sorted(found)


class ConnectedComponent:
    """
    Two-pass 8-connected component labeler.

    Only works for a predefined maximum number of provisional labels and
    treats zero pixels as background.
    """

    def __init__(self, max_component: int = DEFAULT_MAX_COMPONENT) -> None:
        if int(max_component) <= 0:
            raise ValueError("max_component must be a positive integer")
        self.max_component = int(max_component)
        self.properties: Tuple[ComponentProperty, ...] = ()

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> "ConnectedComponent":
        options = labeling_options(settings)
        return cls(options["max_component"])

    def apply(self, image: np.ndarray) -> np.ndarray:
        """
        Label the 8-connected foreground regions of ``image``.

        Args:
            image: Single-channel uint8 image (0 = background)

        Returns:
            int32 label image of the same shape with dense labels 1..N

        Raises:
            PreconditionViolation: If image is not a 2-D uint8 array
            LabelCapacityExceeded: If pass 1 runs out of provisional labels
        """
        if not isinstance(image, np.ndarray) or image.ndim != 2 or image.dtype != np.uint8:
            raise PreconditionViolation("ConnectedComponent expects a single-channel 8-bit image")

        result = image.astype(np.int32)
        linked = DisjointSet(self.max_component)

        provisional = self._first_pass(result, linked)
        self._second_pass(result, linked)
        logger.debug(
            "resolved %d provisional labels into %d components",
            provisional,
            linked.next_resolved - 1,
        )

        labels = np.unique(result[result != 0])

        self.properties = tuple(component_properties(result, labels))
        return result

    def _first_pass(self, result: np.ndarray, linked: DisjointSet) -> int:
        height, width = result.shape
        next_label = 1

        for y in range(height):
            for x in range(width):
                if result[y, x] == 0:
                    continue

                neighbors = _neighbor_labels(result, y, x, width)
                if not neighbors:
                    if next_label >= self.max_component:
                        logger.debug("label space exhausted at (%d, %d)", y, x)
                        raise LabelCapacityExceeded(
                            f"Current label count [{next_label}] exceeds maximum "
                            f"no of components [{self.max_component}]"
                        )
                    result[y, x] = next_label
                    next_label += 1
                else:
                    # Use the minimum label out of the neighbors
                    current = neighbors[0]
                    result[y, x] = current
                    for neighbor in neighbors:
                        linked.union(current, neighbor)

        return next_label - 1

    @staticmethod
    def _second_pass(result: np.ndarray, linked: DisjointSet) -> None:
        height, width = result.shape
        for y in range(height):
            for x in range(width):
                if result[y, x] != 0:
                    result[y, x] = linked.find(int(result[y, x]))

    def get_components_count(self) -> int:
        return len(self.properties)

    def get_components_properties(self) -> Tuple[ComponentProperty, ...]:
        return self.properties


def connected_components(
    binary_image: np.ndarray,
    max_component: int = DEFAULT_MAX_COMPONENT,
) -> Tuple[np.ndarray, Tuple[ComponentProperty, ...]]:
    """
    Label connected components in a binary image.

    Returns:
        Tuple of (label_image, properties)
    """
    labeler = ConnectedComponent(max_component)
    labels = labeler.apply(binary_image)
    return labels, labeler.get_components_properties()


def detect_blobs(
    image: np.ndarray,
    settings: Dict[str, Any],
) -> Tuple[np.ndarray, List[ComponentProperty]]:
    """
    Label ``image`` and keep the blobs allowed by the ``blob`` settings.

    The label image still carries every component; only the returned
    records are filtered. Use ``blobs_mask`` to render the kept ones.
    """
    labeler = ConnectedComponent.from_settings(settings)
    labels = labeler.apply(image)

    options = blob_options(settings)
    kept = filter_blobs(
        labeler.get_components_properties(),
        options["min_area"],
        options["max_area"],
        options["eccentricity_range"],
    )
    logger.debug("kept %d of %d blobs", len(kept), labeler.get_components_count())
    return labels, kept
