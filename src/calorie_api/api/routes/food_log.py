"""Food log, goal and calendar API routes."""

from datetime import date

from fastapi import APIRouter, Query, Response, status

from calorie_api.api.dependencies import FoodLogStoreDep
from calorie_api.core.exceptions import NotFoundError
from calorie_api.models.analysis import AnalysisResult
from calorie_api.models.food_log import (
    CalendarDay,
    CreateEntryRequest,
    DailyLog,
    FoodLogEntry,
    GoalProgress,
    GoalRequest,
    GoalResponse,
    UpdateEntryRequest,
)

router = APIRouter()


# =============================================================================
# Food log
# =============================================================================


@router.get("/food-log", response_model=list[DailyLog])
async def list_days(store: FoodLogStoreDep) -> list[DailyLog]:
    """All logged days, oldest first."""
    return store.list_days()


@router.get("/food-log/{day}", response_model=DailyLog)
async def get_day(day: date, store: FoodLogStoreDep) -> DailyLog:
    """Entries logged on one date (YYYY-MM-DD)."""
    log = store.get_day(day.isoformat())
    if log is None:
        raise NotFoundError("Daily log", day.isoformat())
    return log


@router.post(
    "/food-log/entries",
    response_model=FoodLogEntry,
    status_code=status.HTTP_201_CREATED,
)
async def create_entry(request: CreateEntryRequest, store: FoodLogStoreDep) -> FoodLogEntry:
    """
    Log an analysis result under today's date.

    Typically called with the body returned by /api/analyze-food plus the
    image and the user's description.
    """
    result = AnalysisResult(
        name=request.name,
        calories=request.calories,
        analysis=request.analysis,
    )
    return store.add_entry(result, description=request.description, image_url=request.image_url)


@router.patch("/food-log/entries/{entry_id}", response_model=FoodLogEntry)
async def update_entry(
    entry_id: str,
    request: UpdateEntryRequest,
    store: FoodLogStoreDep,
) -> FoodLogEntry:
    """Edit the name, calories or description of an entry."""
    return store.update_entry(
        entry_id,
        name=request.name,
        calories=request.calories,
        description=request.description,
    )


@router.delete("/food-log/entries/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(entry_id: str, store: FoodLogStoreDep) -> Response:
    """Remove an entry."""
    store.delete_entry(entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Goal
# =============================================================================


@router.get("/goal", response_model=GoalResponse)
async def get_goal(store: FoodLogStoreDep) -> GoalResponse:
    return GoalResponse(daily_goal=store.get_goal())


@router.put("/goal", response_model=GoalResponse)
async def set_goal(request: GoalRequest, store: FoodLogStoreDep) -> GoalResponse:
    return GoalResponse(daily_goal=store.set_goal(request.daily_goal))


@router.get("/goal/progress", response_model=GoalProgress)
async def goal_progress(
    store: FoodLogStoreDep,
    day: date | None = Query(None, alias="date", description="Defaults to today (UTC)"),
) -> GoalProgress:
    """Calories consumed against the daily goal."""
    return store.goal_progress(day)


# =============================================================================
# Calendar
# =============================================================================


@router.get("/calendar/{year}/{month}", response_model=list[CalendarDay])
async def calendar_month(year: int, month: int, store: FoodLogStoreDep) -> list[CalendarDay]:
    """Daily totals and heat-map levels for every day of a month."""
    return store.calendar_month(year, month)
