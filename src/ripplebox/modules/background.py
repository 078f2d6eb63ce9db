import logging

import cv2
import numpy as np

from ripplebox.core.state import RefractionBackground

logger = logging.getLogger(__name__)


def background_from_image(rgb, grid_size, refraction_size):
    """
    Builds the two background rasters from one RGB image.
    grid_size, refraction_size: (width, height)
    """
    rgb = np.ascontiguousarray(rgb, dtype=np.uint8)
    if rgb.ndim == 2:
        rgb = cv2.cvtColor(rgb, cv2.COLOR_GRAY2RGB)
    elif rgb.shape[2] == 4:
        rgb = cv2.cvtColor(rgb, cv2.COLOR_RGBA2RGB)

    source = cv2.resize(rgb, tuple(grid_size), interpolation=cv2.INTER_AREA)
    base = cv2.resize(rgb, tuple(refraction_size), interpolation=cv2.INTER_AREA)
    return RefractionBackground(source=source, base=base)


def load_background(path, grid_size, refraction_size):
    bgr = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if bgr is None:
        raise FileNotFoundError(f"Could not read background image: {path}")
    rgb = cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)
    background = background_from_image(rgb, grid_size, refraction_size)
    logger.info(f"Loaded background {path} ({bgr.shape[1]}x{bgr.shape[0]})")
    return background
