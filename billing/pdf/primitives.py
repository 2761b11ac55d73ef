"""Page description: positioned primitives grouped into named blocks.

Coordinates are PDF points measured from the top-left corner of the page,
y growing downwards. Text y is the top of the line box.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    text: str
    font: str
    size: float
    # width of the slot the text is aligned in; required for "center" and "right"
    width: Optional[float] = None
    align: str = "left"
    color: Optional[str] = None


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    width: float = 0.5


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    width: float
    height: float
    line_width: float = 0.5
    radius: float = 0.0


@dataclass(frozen=True)
class Image:
    path: str
    x: float
    y: float
    width: float
    height: float


Primitive = Union[Text, Line, Box, Image]


@dataclass(frozen=True)
class Block:
    name: str
    ops: Tuple[Primitive, ...] = ()

    def texts(self) -> List[str]:
        return [op.text for op in self.ops if isinstance(op, Text)]


@dataclass(frozen=True)
class PageDescription:
    width: float
    height: float
    blocks: Tuple[Block, ...] = field(default_factory=tuple)

    def block(self, name: str) -> Block:
        for b in self.blocks:
            if b.name == name:
                return b
        raise KeyError(name)

    def __iter__(self) -> Iterator[Block]:
        return iter(self.blocks)
