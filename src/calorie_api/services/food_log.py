"""Food log store backed by a local JSON file.

Holds daily logs keyed by date and the daily calorie goal. The whole
document is read once and rewritten on every mutation.
"""

import json
import logging
import threading
from datetime import date, datetime
from pathlib import Path
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from calorie_api.core.exceptions import FoodLogError, NotFoundError, ValidationError
from calorie_api.models.analysis import AnalysisResult
from calorie_api.models.food_log import (
    CalendarDay,
    CalorieLevel,
    DailyLog,
    FoodLogDocument,
    FoodLogEntry,
    GoalProgress,
    GoalStatus,
)
from calorie_api.utils.dates import calendar_month_dates, to_iso_date, utc_now

logger = logging.getLogger(__name__)


def calorie_level(calories: int) -> CalorieLevel:
    """Bucket a day's total for the calendar heat-map."""
    if calories == 0:
        return CalorieLevel.NONE
    if calories < 1000:
        return CalorieLevel.LOW
    if calories < 1500:
        return CalorieLevel.MODERATE
    if calories < 2000:
        return CalorieLevel.ON_TRACK
    return CalorieLevel.OVER


def goal_status(percentage: float) -> GoalStatus:
    if percentage < 50:
        return GoalStatus.KEEP_GOING
    if percentage < 75:
        return GoalStatus.GOOD_PROGRESS
    if percentage < 100:
        return GoalStatus.ALMOST_THERE
    return GoalStatus.GOAL_ACHIEVED


class FoodLogStore:
    """
    File-backed food log.

    Mutations are serialized with a process-local lock; there is no
    cross-process coordination.
    """

    def __init__(self, path: str | Path, default_goal: int = 2000):
        """
        Load the log from disk.

        Args:
            path: JSON file location (created on first write)
            default_goal: Daily goal used when the file does not exist

        Raises:
            FoodLogError: If the file exists but cannot be parsed
        """
        self.path = Path(path)
        self._lock = threading.Lock()
        self._doc = self._load(default_goal)

    def _load(self, default_goal: int) -> FoodLogDocument:
        if not self.path.exists():
            return FoodLogDocument(daily_goal=default_goal)

        try:
            return FoodLogDocument.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, PydanticValidationError) as e:
            logger.error(f"Failed to load food log from {self.path}: {e}")
            raise FoodLogError(f"Could not read food log at {self.path}", details=str(e)) from e

    def _save(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(
                json.dumps(self._doc.model_dump(mode="json"), indent=2),
                encoding="utf-8",
            )
            tmp_path.replace(self.path)
        except OSError as e:
            logger.error(f"Failed to write food log to {self.path}: {e}")
            raise FoodLogError(f"Could not write food log at {self.path}", details=str(e)) from e

    def _find_entry(self, entry_id: str) -> tuple[DailyLog, FoodLogEntry]:
        for log in self._doc.food_logs:
            for item in log.items:
                if item.id == entry_id:
                    return log, item
        raise NotFoundError("Food entry", entry_id)

    # =========================================================================
    # Entries
    # =========================================================================

    def add_entry(
        self,
        result: AnalysisResult,
        description: str | None = None,
        image_url: str | None = None,
        now: datetime | None = None,
    ) -> FoodLogEntry:
        """
        Log an analysis result under today's date.

        An empty description defaults to the food name.
        """
        now = now or utc_now()
        entry = FoodLogEntry(
            id=uuid4().hex,
            timestamp=now.isoformat(),
            name=result.name,
            calories=result.calories,
            analysis=result.analysis,
            description=description or result.name,
            image_url=image_url,
        )
        day = to_iso_date(now)

        with self._lock:
            log = next((log for log in self._doc.food_logs if log.date == day), None)
            if log is None:
                log = DailyLog(date=day)
                self._doc.food_logs.append(log)
            log.items.append(entry)
            self._save()

        logger.info(f"Logged {entry.name} ({entry.calories} cal) on {day}")
        return entry

    def update_entry(
        self,
        entry_id: str,
        *,
        name: str | None = None,
        calories: int | None = None,
        description: str | None = None,
    ) -> FoodLogEntry:
        """
        Edit a logged entry in place.

        Raises:
            NotFoundError: Unknown entry id
            ValidationError: Empty name or negative calories
        """
        if name is not None and not name.strip():
            raise ValidationError("Name must not be empty")
        if calories is not None and calories < 0:
            raise ValidationError("Calories must not be negative", details={"calories": calories})

        with self._lock:
            log, item = self._find_entry(entry_id)
            updates = {
                key: value
                for key, value in (
                    ("name", name),
                    ("calories", calories),
                    ("description", description),
                )
                if value is not None
            }
            updated = item.model_copy(update=updates)
            log.items[log.items.index(item)] = updated
            self._save()

        logger.info(f"Updated food entry {entry_id}: {sorted(updates)}")
        return updated

    def delete_entry(self, entry_id: str) -> None:
        """
        Remove a logged entry. The day stays in the log even if emptied.

        Raises:
            NotFoundError: Unknown entry id
        """
        with self._lock:
            log, item = self._find_entry(entry_id)
            log.items.remove(item)
            self._save()

        logger.info(f"Deleted food entry {entry_id}")

    # =========================================================================
    # Days
    # =========================================================================

    def list_days(self) -> list[DailyLog]:
        return sorted(self._doc.food_logs, key=lambda log: log.date)

    def get_day(self, day: str) -> DailyLog | None:
        return next((log for log in self._doc.food_logs if log.date == day), None)

    def calories_for(self, day: str) -> int:
        log = self.get_day(day)
        return log.total_calories if log else 0

    def today_calories(self, today: date | None = None) -> int:
        today = today or utc_now().date()
        return self.calories_for(today.isoformat())

    # =========================================================================
    # Goal
    # =========================================================================

    def get_goal(self) -> int:
        return self._doc.daily_goal

    def set_goal(self, goal: int) -> int:
        """
        Change the daily goal.

        Raises:
            ValidationError: Goal is not a positive integer
        """
        if isinstance(goal, bool) or not isinstance(goal, int) or goal <= 0:
            raise ValidationError("Daily goal must be a positive integer", details={"daily_goal": goal})

        with self._lock:
            self._doc.daily_goal = goal
            self._save()

        logger.info(f"Daily goal set to {goal}")
        return goal

    def goal_progress(self, day: date | None = None) -> GoalProgress:
        """Calories consumed on a day against the goal."""
        day = day or utc_now().date()
        current = self.calories_for(day.isoformat())
        goal = self._doc.daily_goal
        percentage = min(current / goal * 100, 100.0)

        return GoalProgress(
            date=day.isoformat(),
            current=current,
            goal=goal,
            percentage=round(percentage, 1),
            remaining=max(goal - current, 0),
            status=goal_status(percentage),
        )

    # =========================================================================
    # Calendar
    # =========================================================================

    def calendar_month(self, year: int, month: int) -> list[CalendarDay]:
        """
        One heat-map cell per day of the month.

        Raises:
            ValidationError: Month is not in 1-12
        """
        try:
            dates = calendar_month_dates(year, month)
        except ValueError as e:
            raise ValidationError(str(e), details={"year": year, "month": month}) from e

        days = []
        for day in dates:
            calories = self.calories_for(day.isoformat())
            days.append(
                CalendarDay(date=day.isoformat(), calories=calories, level=calorie_level(calories))
            )
        return days
