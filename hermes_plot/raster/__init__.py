from .canvas import blend_mask, draw_hline, draw_vline, new_canvas
from .draw_lines import draw_line, draw_polyline
from .draw_shapes import fill_circle, fill_polygon, fill_rect
from .draw_text import draw_text, text_size
from .renderer import RasterRenderer

__all__ = [
    "RasterRenderer",
    "blend_mask",
    "draw_hline",
    "draw_line",
    "draw_polyline",
    "draw_text",
    "draw_vline",
    "fill_circle",
    "fill_polygon",
    "fill_rect",
    "new_canvas",
    "text_size",
]
