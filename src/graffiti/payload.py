"""Pixel set -> draw call arguments."""

from dataclasses import dataclass, field
from typing import Any

from graffiti.grid import PixelSet


@dataclass(frozen=True, slots=True)
class Payload:
    resource_id: str
    xs: list[int] = field(default_factory=list)
    ys: list[int] = field(default_factory=list)
    colors: list[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.xs)

    def arguments(self) -> list[Any]:
        return [self.resource_id, list(self.xs), list(self.ys), list(self.colors)]

    def entry_function(self, function_id: str) -> dict[str, Any]:
        return {
            "type": "entry_function_payload",
            "function": function_id,
            "type_arguments": [],
            "arguments": self.arguments(),
        }


def encode(pixel_set: PixelSet, resource_id: str) -> Payload:
    xs, ys, colors = [], [], []
    for pixel in pixel_set:
        xs.append(pixel.x)
        ys.append(pixel.y)
        colors.append(pixel.color)
    return Payload(resource_id=resource_id, xs=xs, ys=ys, colors=colors)
