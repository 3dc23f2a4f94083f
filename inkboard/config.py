"""
Editor defaults and limits.
"""
from dataclasses import dataclass

from inkboard.core.geometry import clamp
from inkboard.core.items.models import FontFamily

# Standard (base-14) fonts used for the two text families
STANDARD_FONTS = {
    FontFamily.SANS: "Helvetica",
    FontFamily.SERIF: "Times-Roman",
}

OUTPUT_PREFIX = "edited-"


@dataclass
class EditorSettings:
    """Current tool settings of an edit session."""

    color: str = "#d32f2f"
    font_size: float = 16
    pen_size: float = 2
    font_family: FontFamily = FontFamily.SANS
    default_text: str = "Edit me"

    min_font_size: float = 8
    max_font_size: float = 96
    min_pen_size: float = 1
    max_pen_size: float = 12

    scale: float = 1.0
    min_scale: float = 0.5
    max_scale: float = 3.0
    scale_step: float = 0.1

    # Inserted images span this fraction of the page width, centred here
    image_width_fraction: float = 0.4
    image_center: tuple = (0.5, 0.4)

    def set_font_size(self, size: float) -> float:
        self.font_size = clamp(size, self.min_font_size, self.max_font_size)
        return self.font_size

    def set_pen_size(self, size: float) -> float:
        self.pen_size = clamp(size, self.min_pen_size, self.max_pen_size)
        return self.pen_size

    def set_scale(self, scale: float) -> float:
        """Clamp the zoom factor into range, rounded to two decimals."""
        self.scale = round(clamp(scale, self.min_scale, self.max_scale), 2)
        return self.scale
