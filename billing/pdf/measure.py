from __future__ import annotations

from typing import List

from reportlab.pdfbase import pdfmetrics

# Line advance as a fraction of font size (Helvetica ascender + descender + a little gap)
LINE_HEIGHT_RATIO = 1.16


class TextMeasure:
    """Font metrics without a canvas.

    Layout code asks this object for sizes before anything is drawn, so the
    same numbers hold regardless of the drawing surface's current font state.
    Subclasses only need to override `width`.
    """

    def width(self, text: str, font: str, size: float) -> float:
        return pdfmetrics.stringWidth(text or "", font, size)

    def line_height(self, size: float) -> float:
        return size * LINE_HEIGHT_RATIO

    def wrap(self, text: str, max_width: float, font: str, size: float) -> List[str]:
        """Greedy word wrap; a word wider than the line is hard-split by characters."""
        lines: List[str] = []
        for para in (text or "").replace("\r", "").split("\n"):
            line = ""
            for word in para.split():
                trial = f"{line} {word}" if line else word
                if self.width(trial, font, size) <= max_width:
                    line = trial
                    continue
                if line:
                    lines.append(line)
                line = word
                while len(line) > 1 and self.width(line, font, size) > max_width:
                    cut = len(line) - 1
                    while cut > 1 and self.width(line[:cut], font, size) > max_width:
                        cut -= 1
                    lines.append(line[:cut])
                    line = line[cut:]
            lines.append(line)
        return lines if any(lines) else []

    def height(self, text: str, max_width: float, font: str, size: float) -> float:
        return len(self.wrap(text, max_width, font, size)) * self.line_height(size)


DEFAULT_MEASURE = TextMeasure()
