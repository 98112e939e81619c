"""
Screen-to-logical coordinate mapping.

Pointer input arrives in screen pixels; layout and drag arithmetic happen in
the fixed logical canvas. A ScreenTransform holds the logical-to-screen
affine matrix of the drawing surface (the same six numbers as an SVG screen
CTM) and maps pointer coordinates back through its inverse.
"""

from dataclasses import dataclass

from .models import CANVAS_HEIGHT, CANVAS_WIDTH, Position


@dataclass(frozen=True)
class ScreenTransform:
    """
    Affine logical-to-screen matrix.

        screen_x = a * x + c * y + e
        screen_y = b * x + d * y + f
    """
    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    def __post_init__(self):
        if self.determinant == 0:
            raise ValueError("Screen transform is not invertible")

    @property
    def determinant(self) -> float:
        return self.a * self.d - self.b * self.c

    @classmethod
    def identity(cls) -> "ScreenTransform":
        return cls()

    @classmethod
    def fit_viewbox(
        cls,
        left: float,
        top: float,
        width: float,
        height: float,
        view_width: float = CANVAS_WIDTH,
        view_height: float = CANVAS_HEIGHT
    ) -> "ScreenTransform":
        """
        Transform for a viewBox drawn into a screen box with uniform scaling,
        centred along the axis that has spare room (xMidYMid meet).

        Args:
            left: Screen x of the box's left edge
            top: Screen y of the box's top edge
            width: On-screen box width in pixels
            height: On-screen box height in pixels
            view_width: Logical viewBox width
            view_height: Logical viewBox height

        Returns:
            The logical-to-screen transform
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Viewport must have a positive size, got {width}x{height}")

        scale = min(width / view_width, height / view_height)
        offset_x = left + (width - view_width * scale) / 2
        offset_y = top + (height - view_height * scale) / 2
        return cls(a=scale, d=scale, e=offset_x, f=offset_y)

    def to_screen(self, x: float, y: float) -> Position:
        """Map a logical point to screen coordinates."""
        return Position(
            x=self.a * x + self.c * y + self.e,
            y=self.b * x + self.d * y + self.f,
        )

    def inverse(self) -> "ScreenTransform":
        """The screen-to-logical matrix."""
        det = self.determinant
        return ScreenTransform(
            a=self.d / det,
            b=-self.b / det,
            c=-self.c / det,
            d=self.a / det,
            e=(self.c * self.f - self.d * self.e) / det,
            f=(self.b * self.e - self.a * self.f) / det,
        )

    def to_logical(self, x: float, y: float) -> Position:
        """Map a screen point to logical canvas coordinates."""
        return self.inverse().to_screen(x, y)
