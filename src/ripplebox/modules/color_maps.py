import cv2
import numpy as np

GRAY = "Gray"


class ColorMapManager:
    def __init__(self):
        # Plain luminance first, then every COLORMAP_ constant cv2 ships
        self.available_maps = {GRAY: None}
        self.available_maps.update({
            name.replace("COLORMAP_", "").capitalize(): getattr(cv2, name)
            for name in dir(cv2) if name.startswith("COLORMAP_")
        })
        self.current_name = GRAY

    @property
    def current_map_id(self):
        return self.available_maps[self.current_name]

    def get_names(self):
        """Returns a list of human-readable names for the GUI combo box."""
        return list(self.available_maps.keys())

    def set_map_by_name(self, name):
        if name in self.available_maps:
            self.current_name = name

    def apply(self, luminance):
        """
        Colours an 8-bit single-channel image (0-255).
        Returns an RGB image; Gray copies the luminance into all three channels.
        """
        if self.current_map_id is None:
            return np.repeat(luminance[:, :, None], 3, axis=2)
        bgr = cv2.applyColorMap(luminance, self.current_map_id)
        return cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)
