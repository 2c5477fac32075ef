# cartography/services/text_layout.py
import logging
from typing import Protocol

from PIL import ImageFont

from cartography.core.config import Settings, settings as default_settings
from cartography.core.styles import MANUAL_BREAKS_BY_NAME, EXTRA_PADDING_BY_NAME
from cartography.models.graph import Node, RenderAnnotation

logger = logging.getLogger(__name__)


class Measurer(Protocol):
    def width(self, text: str) -> float: ...


class TextMeasurer:
    """Rendered text width for one font, measured with Pillow."""

    def __init__(self, font_size: int, font_path: str = ""):
        if font_path:
            self.font = ImageFont.truetype(font_path, font_size)
        else:
            self.font = ImageFont.load_default(size=font_size)
        self._cache: dict[str, float] = {}

    @classmethod
    def from_settings(cls, config: Settings) -> "TextMeasurer":
        return cls(config.FONT_SIZE, config.FONT_PATH)

    def width(self, text: str) -> float:
        if text not in self._cache:
            self._cache[text] = float(self.font.getlength(text))
        return self._cache[text]


class TextLayoutEngine:
    """
    Word-wraps node names into label lines and sizes the circle that holds them.

    Names listed in the manual break table are laid out from their override text.
    An override containing explicit line breaks is already a finished shape and is
    returned segment by segment; any other text is greedily packed on plain spaces,
    so tokens glued with a non-breaking space always stay on one line.
    """

    def __init__(
        self,
        measurer: Measurer | None = None,
        config: Settings | None = None,
        manual_breaks: dict[str, str] | None = None,
        extra_padding: dict[str, float] | None = None,
    ):
        self.config = config or default_settings
        self.measurer = measurer or TextMeasurer.from_settings(self.config)
        self.manual_breaks = MANUAL_BREAKS_BY_NAME if manual_breaks is None else manual_breaks
        self.extra_padding = EXTRA_PADDING_BY_NAME if extra_padding is None else extra_padding

    def display_text(self, name: str) -> str:
        return self.manual_breaks.get(name, name)

    def wrap(self, name: str | None, max_width: float | None = None) -> list[str]:
        if not name:
            return []
        if max_width is None:
            max_width = self.config.TEXT_MAX_WIDTH

        segments = self.display_text(name).split("\n")
        # Hand-tuned overrides with explicit breaks are finished shapes; their segments are not repacked.
        if name in self.manual_breaks and len(segments) > 1:
            return segments

        lines: list[str] = []
        for segment in segments:
            lines.extend(self._pack(segment, max_width))
        return lines

    def _pack(self, segment: str, max_width: float) -> list[str]:
        lines: list[str] = []
        current: list[str] = []
        for token in segment.split(" "):
            candidate = " ".join([*current, token])
            if current and self.measurer.width(candidate) > max_width:
                lines.append(" ".join(current))
                current = [token]
            else:
                current.append(token)
        if current:
            lines.append(" ".join(current))
        return lines

    def radius(
        self,
        node: Node,
        max_width: float | None = None,
        font_size: float | None = None,
        base_padding: float | None = None,
        min_radius: float | None = None,
    ) -> float:
        font_size = self.config.FONT_SIZE if font_size is None else font_size
        base_padding = self.config.BASE_PADDING if base_padding is None else base_padding
        min_radius = self.config.MIN_RADIUS if min_radius is None else min_radius

        lines = self.wrap(node.name, max_width)
        if not lines:
            return float(min_radius)

        half_width = max(self.measurer.width(line) for line in lines) / 2
        half_height = len(lines) * (font_size + 2) / 2
        padding = base_padding + self.extra_padding.get(node.name, 0)
        return float(max(max(half_width, half_height) + padding, min_radius))

    def cached_radius(self, node: Node, annotation: RenderAnnotation) -> float:
        """Returns the radius stored on the annotation, recomputing only when the name changed."""
        if annotation.radius is None or annotation.radius_name != node.name:
            annotation.radius = self.radius(node)
            annotation.radius_name = node.name
            logger.debug("Computed radius %.1f for node %s", annotation.radius, node.id)
        return annotation.radius
