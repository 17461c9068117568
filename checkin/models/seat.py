"""
Cabin seat layout models.

The layout is static per service: each cabin spans a row range and a letter
pattern where a space marks the aisle.
"""

from typing import List
from pydantic import BaseModel, Field, ConfigDict


class CabinLayoutModel(BaseModel):
    """Row range and seat letters for one cabin."""
    model_config = ConfigDict(frozen=True)

    start: int = Field(..., ge=1, description="First row")
    end: int = Field(..., ge=1, description="Last row")
    letters: str = Field(..., description="Seat letters, space marks the aisle")

    def seat_codes(self) -> List[str]:
        """All seat codes in the cabin, row by row."""
        letters = [c for c in self.letters if c != " "]
        return [f"{row}{letter}" for row in range(self.start, self.end + 1) for letter in letters]


class SeatLayoutModel(BaseModel):
    """Business and economy cabins of the served aircraft."""
    model_config = ConfigDict(frozen=True)

    biz: CabinLayoutModel
    eco: CabinLayoutModel

    @classmethod
    def default(cls) -> "SeatLayoutModel":
        """Standard two-cabin narrowbody layout."""
        return cls(
            biz=CabinLayoutModel(start=1, end=4, letters="AC DF"),
            eco=CabinLayoutModel(start=5, end=35, letters="ABC DEF"),
        )

    @property
    def total_seats(self) -> int:
        return len(self.biz.seat_codes()) + len(self.eco.seat_codes())
