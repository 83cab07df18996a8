"""
Per-blob measurements computed from image moments.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import cv2
import numpy as np

Moments = Dict[str, float]


@dataclass(frozen=True)
class ComponentProperty:
    """Measurements of one labeled blob."""
    label_id: int
    area: int
    centroid: Tuple[float, float]  # (x, y)
    eccentricity: float


def blob_centroid(moment: Moments) -> Tuple[float, float]:
    return (moment["m10"] / moment["m00"], moment["m01"] / moment["m00"])


def blob_eccentricity(moment: Moments) -> float:
    """
    Eccentricity from the eigenvalues of the normalized second-order
    central moments (the blob's covariance matrix).

    0 for a circle-like blob, approaching 1 for an elongated one. A blob with
    no spread at all (a single pixel) has no defined axis and yields 0.
    """
    nu20, nu02, nu11 = moment["nu20"], moment["nu02"], moment["nu11"]

    mean_term = (nu20 + nu02) / 2.0
    spread_term = math.sqrt(4.0 * nu11 * nu11 + (nu20 - nu02) ** 2) / 2.0

    eig1 = mean_term + spread_term
    eig2 = mean_term - spread_term
    if eig1 <= 0.0:
        return 0.0

    ratio = min(1.0, max(0.0, eig2 / eig1))
    return math.sqrt(1.0 - ratio)


def component_properties(label_image: np.ndarray, labels: Iterable[int]) -> List[ComponentProperty]:
    """
    Measure every label in ``labels`` (ascending) on ``label_image``.

    Args:
        label_image: Integer label image (0 = background)
        labels: Final label ids present in the image

    Returns:
        One ComponentProperty per label, in the order given
    """
    properties: List[ComponentProperty] = []

    for label_id in labels:
        blob = (label_image == label_id).astype(np.uint8)
        moment = cv2.moments(blob, binaryImage=True)

        properties.append(
            ComponentProperty(
                label_id=int(label_id),
                area=int(cv2.countNonZero(blob)),
                centroid=blob_centroid(moment),
                eccentricity=blob_eccentricity(moment),
            )
        )

    return properties


def filter_blobs(
    properties: Sequence[ComponentProperty],
    min_area: int,
    max_area: int,
    eccentricity_range: Tuple[float, float] = (0.0, 1.0),
) -> List[ComponentProperty]:
    filtered: List[ComponentProperty] = []
    min_ecc, max_ecc = eccentricity_range

    for prop in properties:
        if prop.area < min_area or prop.area > max_area:
            continue
        if prop.eccentricity < min_ecc or prop.eccentricity > max_ecc:
            continue
        filtered.append(prop)

    return filtered


def largest_blob(properties: Sequence[ComponentProperty]) -> Optional[ComponentProperty]:
    """Record with the biggest area; ties go to the lowest label id."""
    if not properties:
        return None
    return max(properties, key=lambda p: (p.area, -p.label_id))


def blobs_mask(label_image: np.ndarray, properties: Iterable[ComponentProperty]) -> np.ndarray:
    """
    Render the pixels of the given records as a 0/255 uint8 mask.

    Args:
        label_image: Label image the records were measured on
        properties: Records to keep, e.g. the output of filter_blobs

    Returns:
        uint8 mask with the shape of label_image
    """
    keep = [prop.label_id for prop in properties]
    output = np.zeros(label_image.shape, dtype=np.uint8)
    if keep:
        output[np.isin(label_image, keep)] = 255
    return output
