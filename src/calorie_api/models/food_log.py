"""Pydantic models for the food log.

The log is a key-value document: a list of daily logs keyed by date plus a
single numeric daily goal.
"""

from enum import Enum

from pydantic import BaseModel, Field, computed_field

from calorie_api.models.analysis import AnalysisResult


class GoalStatus(str, Enum):
    """Progress towards the daily goal."""

    KEEP_GOING = "keep_going"  # < 50%
    GOOD_PROGRESS = "good_progress"  # < 75%
    ALMOST_THERE = "almost_there"  # < 100%
    GOAL_ACHIEVED = "goal_achieved"


class CalorieLevel(str, Enum):
    """Calendar heat-map bucket for a day's total."""

    NONE = "none"  # 0
    LOW = "low"  # < 1000
    MODERATE = "moderate"  # < 1500
    ON_TRACK = "on_track"  # < 2000
    OVER = "over"


class FoodLogEntry(AnalysisResult):
    """A logged food item."""

    id: str = Field(..., description="Entry identifier")
    timestamp: str = Field(..., description="ISO-8601 UTC time the entry was logged")
    description: str | None = Field(None, description="User-entered description")
    image_url: str | None = Field(None, description="Image data URI")


class DailyLog(BaseModel):
    """All entries logged on one date."""

    date: str = Field(..., description="Date as YYYY-MM-DD")
    items: list[FoodLogEntry] = Field(default_factory=list)

    @computed_field
    @property
    def total_calories(self) -> int:
        return sum(item.calories for item in self.items)


class FoodLogDocument(BaseModel):
    """On-disk shape of the food log."""

    food_logs: list[DailyLog] = Field(default_factory=list)
    daily_goal: int = Field(2000, gt=0)


# =============================================================================
# Request Models
# =============================================================================


class CreateEntryRequest(BaseModel):
    """Request to log an analysis result."""

    name: str = Field("Unknown Food", min_length=1)
    calories: int = Field(300, ge=0)
    analysis: str = "Unable to analyze food item"
    description: str | None = None
    image_url: str | None = None


class UpdateEntryRequest(BaseModel):
    """Partial update of a logged entry."""

    name: str | None = Field(None, min_length=1)
    calories: int | None = Field(None, ge=0)
    description: str | None = None


class GoalRequest(BaseModel):
    """Request to change the daily goal."""

    daily_goal: int = Field(..., gt=0)


# =============================================================================
# Response Models
# =============================================================================


class GoalResponse(BaseModel):
    """Current daily goal."""

    daily_goal: int


class GoalProgress(BaseModel):
    """Today's calories against the daily goal."""

    date: str
    current: int
    goal: int
    percentage: float = Field(..., ge=0, le=100)
    remaining: int = Field(..., ge=0)
    status: GoalStatus


class CalendarDay(BaseModel):
    """One cell of the calendar heat-map."""

    date: str
    calories: int
    level: CalorieLevel
