"""Standard page sizes in points (1 point = 1/72 inch)."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Annotated

from annotated_types import Gt
from pydantic import BaseModel, ConfigDict

PositiveFloat = Annotated[float, Gt(0)]


class PageSize(BaseModel):
    """Portrait dimensions of a page size."""

    model_config = ConfigDict(frozen=True)

    width: PositiveFloat
    height: PositiveFloat

    def matches(self, width: float, height: float, tolerance: float) -> bool:
        """True if a page matches this size in portrait or landscape orientation.

        Each dimension must be within ``tolerance`` points.
        """
        portrait = (
            abs(width - self.width) <= tolerance
            and abs(height - self.height) <= tolerance
        )
        landscape = (
            abs(width - self.height) <= tolerance
            and abs(height - self.width) <= tolerance
        )
        return portrait or landscape


PAGE_SIZES: Mapping[str, PageSize] = MappingProxyType(
    {
        "A0": PageSize(width=2384, height=3370),
        "A1": PageSize(width=1684, height=2384),
        "A2": PageSize(width=1191, height=1684),
        "A3": PageSize(width=842, height=1191),
        "A4": PageSize(width=595, height=842),
        "A5": PageSize(width=420, height=595),
        "A6": PageSize(width=298, height=420),
        "Letter": PageSize(width=612, height=792),
        "Legal": PageSize(width=612, height=1008),
        "Tabloid": PageSize(width=792, height=1224),
        "Executive": PageSize(width=522, height=756),
        "B4": PageSize(width=729, height=1032),
        "B5": PageSize(width=516, height=729),
    }
)

# expectedSize value that selects customWidth/customHeight instead of the table.
CUSTOM_SIZE = "custom"


def get_available_page_sizes() -> list[str]:
    """Names of all standard page sizes, in table order."""
    return list(PAGE_SIZES)


def get_page_size_dimensions(name: str) -> PageSize | None:
    """Look up a standard page size by exact name."""
    return PAGE_SIZES.get(name)


def resolve_page_size(
    name: str,
    custom_width: float | None = None,
    custom_height: float | None = None,
) -> PageSize | None:
    """Resolve the target size for a page-size check.

    ``"custom"`` with both custom dimensions set selects those dimensions;
    otherwise the name is looked up in the standard table.

    Returns:
        The target size, or None if it cannot be resolved.
    """
    if name == CUSTOM_SIZE and custom_width and custom_height:
        return PageSize(width=custom_width, height=custom_height)
    return PAGE_SIZES.get(name)
