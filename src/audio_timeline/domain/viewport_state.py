from dataclasses import dataclass


@dataclass
class ViewportState:
    """Zoom factor and the physical width it scales."""
    zoom_level: float = 1.0
    viewport_width_pixels: int = 800

    @property
    def effective_width(self) -> float:
        """Width of the zoomed timeline canvas in pixels."""
        return self.viewport_width_pixels * self.zoom_level
