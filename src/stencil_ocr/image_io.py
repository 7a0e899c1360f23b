"""Image I/O utilities for loading and rotating table images."""

from pathlib import Path
from typing import Union

import cv2
import numpy as np

from .exceptions import ImageLoadError


def load_image(image_path: Union[str, Path]) -> np.ndarray:
    """Load image from file.
    
    Args:
        image_path: Path to the image file
        
    Returns:
        numpy array containing the image
        
    Raises:
        ImageLoadError: If image cannot be loaded
    """
    image = cv2.imread(str(image_path))
    if image is None:
        raise ImageLoadError("Could not load image", image_path=str(image_path))
    return image


def rotate_image(image: np.ndarray, angle: float) -> np.ndarray:
    """Rotate an image about its centre, keeping the canvas size.
    
    Straightens a slightly skewed scan so horizontal and vertical stencil
    lines follow the table rules. Positive angles rotate counter-clockwise.
    
    Args:
        image: Source image
        angle: Rotation in degrees
        
    Returns:
        Rotated copy of the image (the input itself when angle is 0)
    """
    if angle == 0:
        return image
    
    h, w = image.shape[:2]
    center = (w / 2, h / 2)
    rotation_matrix = cv2.getRotationMatrix2D(center, angle, 1.0)
    return cv2.warpAffine(
        image,
        rotation_matrix,
        (w, h),
        flags=cv2.INTER_CUBIC,
        borderMode=cv2.BORDER_REPLICATE,
    )
