from dataclasses import dataclass
from enum import IntEnum
from types import MappingProxyType
from typing import Mapping

from ..models import ScreenSize


class InterfaceOrientation(IntEnum):
    """Interface orientation codes, as stored in `Gaze.orientation`."""
    UNKNOWN = 0
    PORTRAIT = 1
    PORTRAIT_UPSIDE_DOWN = 2
    LANDSCAPE_RIGHT = 3
    LANDSCAPE_LEFT = 4


@dataclass(slots=True, frozen=True)
class PointerAdjustment:
    """
    Maps a projected gaze point onto the live pointer position.

    The pointer is placed at `(width * anchor_x - x, height * anchor_y - y)`,
    i.e. mirrored around an anchor expressed as a fraction of the viewport.
    """
    anchor_x: float
    anchor_y: float

    def apply(self, x: float, y: float, viewport: ScreenSize) -> tuple[float, float]:
        return viewport.width * self.anchor_x - x, viewport.height * self.anchor_y - y


# Hand-tuned against the front camera position; only portrait was measured
# on hardware, the other entries follow from rotating the portrait anchor.
POINTER_ADJUSTMENTS: Mapping[InterfaceOrientation, PointerAdjustment] = MappingProxyType({
    InterfaceOrientation.UNKNOWN: PointerAdjustment(0.5, 1.25),
    InterfaceOrientation.PORTRAIT: PointerAdjustment(0.5, 1.25),
    InterfaceOrientation.PORTRAIT_UPSIDE_DOWN: PointerAdjustment(0.5, -0.25),
    InterfaceOrientation.LANDSCAPE_RIGHT: PointerAdjustment(-0.25, 0.5),
    InterfaceOrientation.LANDSCAPE_LEFT: PointerAdjustment(1.25, 0.5),
})


def pointer_adjustment(orientation: int) -> PointerAdjustment:
    """Looks up the adjustment for an orientation code; unknown codes use UNKNOWN."""
    try:
        return POINTER_ADJUSTMENTS[InterfaceOrientation(orientation)]
    except ValueError:
        return POINTER_ADJUSTMENTS[InterfaceOrientation.UNKNOWN]
