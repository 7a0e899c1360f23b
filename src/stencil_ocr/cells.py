"""Cell extraction: crop one stencil cell out of the source image."""

import numpy as np

from .stencil import Rectangle


def clip_to_image(rectangle: Rectangle, image: np.ndarray, padding: int = 0) -> Rectangle:
    """Shrink a rectangle by ``padding`` on every side and clamp it to the image.
    
    Args:
        rectangle: Cell rectangle in pixel coordinates (fractional values allowed)
        image: Source image, only its shape is used
        padding: Pixels trimmed from each side to keep ruling lines out of the crop
        
    Returns:
        Integer rectangle inside the image; it may be degenerate
    """
    height, width = image.shape[:2]
    padded = Rectangle(
        rectangle.top + padding,
        rectangle.bottom - padding,
        rectangle.left + padding,
        rectangle.right - padding,
    )
    clipped = padded.clip(width, height)
    return Rectangle(int(clipped.top), int(clipped.bottom), int(clipped.left), int(clipped.right))


def extract_cell(image: np.ndarray, rectangle: Rectangle, padding: int = 0) -> np.ndarray:
    """Crop a cell image.
    
    Rectangles reaching outside the image are clipped, never rejected. A
    rectangle that ends up with no width or height produces a zero-area
    array. The crop is a copy, so the shared source image is never exposed
    to a backend.
    
    Args:
        image: Source image (grayscale or color)
        rectangle: Cell rectangle as ``(top, bottom, left, right)``
        padding: Pixels trimmed from each side before clipping
        
    Returns:
        Cropped cell image
    """
    top, bottom, left, right = clip_to_image(rectangle, image, padding)
    bottom = max(bottom, top)
    right = max(right, left)
    return image[top:bottom, left:right].copy()
