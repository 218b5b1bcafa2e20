"""Pydantic schemas for the Adaptus API."""
from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

Gender = Literal["male", "female"]
ActivityLevel = Literal["sedentary", "light", "moderate", "very_active", "extra_active"]


# === Profile ===
class ProfileRead(BaseModel):
    gender: str
    age: int
    height_cm: float
    activity_level: str
    current_weight_kg: float | None = None
    active_phase: str


class ProfileUpdate(BaseModel):
    gender: Gender = "male"
    age: int = Field(25, gt=0, lt=130)
    height_cm: float = Field(175.0, gt=0, lt=300)
    activity_level: ActivityLevel = "moderate"


# === Phases ===
class PhaseWrite(BaseModel):
    # Validated by the scheduler so the caller gets a bad_type code
    phase_type: str
    start_date: date
    end_date: date


class PhaseRead(BaseModel):
    id: int
    phase_type: str
    start_date: date
    end_date: date
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class StabilizationStatus(BaseModel):
    in_stabilization: bool
    days_remaining: int | None = None


class PhaseList(BaseModel):
    phases: list[PhaseRead]
    active_phase: str
    stabilization: StabilizationStatus


# === Adaptive TDEE ===
class WeightTrend(BaseModel):
    current: float
    avg_7d: float | None = None
    avg_prev_7d: float | None = None
    weekly_change_kg: float | None = None
    weekly_change_pct: float | None = None
    entries_7d: int = 0
    entries_prev_7d: int = 0


class TdeeBreakdown(BaseModel):
    bmr: int | None = None
    base_tdee: int | None = None
    activity_multiplier: float
    phase: str
    phase_multiplier: float
    formula_calories: int | None = None
    inferred_tdee: int | None = None
    adaptive_calories: int | None = None
    final_calories: int | None = None
    protein_g: int | None = None
    fat_g: int | None = None
    carbs_g: int | None = None
    weight_trend: WeightTrend | None = None
    data_status: Literal["no_weight", "formula_only", "stabilization", "adaptive"]
    stabilization: StabilizationStatus


# === Targets ===
class TargetsRead(BaseModel):
    calories: int = 2500
    protein: int = 180
    carbs: int = 250
    fat: int = 80

    class Config:
        from_attributes = True


class TargetsUpdate(BaseModel):
    calories: int = Field(..., ge=0)
    protein: int = Field(..., ge=0)
    carbs: int = Field(..., ge=0)
    fat: int = Field(..., ge=0)


class TargetsRefresh(BaseModel):
    refreshed: bool
    difference_kcal: int | None = None
    targets: TargetsRead


# === Weight ===
class WeightLogCreate(BaseModel):
    weight_kg: float = Field(..., gt=0, le=500)
    logged_at: datetime | None = None


class WeightLogRead(BaseModel):
    id: int
    weight_kg: float
    logged_at: datetime

    class Config:
        from_attributes = True


class WeightSummary(BaseModel):
    current: float | None = None
    current_date: datetime | None = None
    avg_7d: float | None = None
    entries_7d: int = 0
    trend: Literal["up", "down", "stable"] | None = None


# === Daily Log ===
class DailyLogCreate(BaseModel):
    name: str
    calories: float = Field(0.0, ge=0)
    protein: float = Field(0.0, ge=0)
    carbs: float = Field(0.0, ge=0)
    fat: float = Field(0.0, ge=0)
    log_date: date | None = Field(None, alias="date")

    class Config:
        populate_by_name = True


class DailyLogRead(BaseModel):
    id: int
    date: date
    name: str
    food_id: int | None = None
    meal_id: int | None = None
    servings: float | None = None
    calories: float
    protein: float
    carbs: float
    fat: float
    logged_at: datetime

    class Config:
        from_attributes = True


class MacroTotals(BaseModel):
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0


class DailyLogDay(BaseModel):
    date: date
    entries: list[DailyLogRead]
    totals: MacroTotals


class HistoryDay(BaseModel):
    date: date
    calories: int
    protein: int
    carbs: int
    fat: int


class LogHistory(BaseModel):
    days: list[HistoryDay]
    targets: TargetsRead


class CopyDayRequest(BaseModel):
    source_date: date
    target_date: date


class CopyDayResult(BaseModel):
    copied: int
    entries: list[DailyLogRead]


class LogFoodRequest(BaseModel):
    food_id: int
    grams: float = Field(100.0, gt=0)
    log_date: date | None = Field(None, alias="date")

    class Config:
        populate_by_name = True


class LogMealRequest(BaseModel):
    meal_id: int
    servings: float = Field(1.0, gt=0)
    log_date: date | None = Field(None, alias="date")

    class Config:
        populate_by_name = True


class LogEntryUpdate(BaseModel):
    # Grams for a food entry, servings for a meal entry
    servings: float = Field(..., gt=0)


# === Food catalog ===
class FoodWrite(BaseModel):
    """Macros per 100 g."""
    name: str = Field(..., min_length=1)
    calories: float = Field(0.0, ge=0)
    protein: float = Field(0.0, ge=0)
    carbs: float = Field(0.0, ge=0)
    fat: float = Field(0.0, ge=0)
    serving_name: str | None = None
    serving_grams: float | None = Field(None, gt=0)
    barcode: str | None = None


class FoodRead(BaseModel):
    id: int
    name: str
    calories: float
    protein: float
    carbs: float
    fat: float
    serving_size: float
    serving_unit: str
    barcode: str | None = None
    created_at: datetime | None = None
    last_used: datetime | None = None

    class Config:
        from_attributes = True


class MealItemWrite(BaseModel):
    food_id: int
    servings: float = Field(1.0, gt=0)


class MealWrite(BaseModel):
    name: str = Field(..., min_length=1)
    foods: list[MealItemWrite] = []


class MealUpdate(BaseModel):
    name: str | None = Field(None, min_length=1)
    foods: list[MealItemWrite] | None = None


class MealItemRead(BaseModel):
    food_id: int
    name: str
    servings: float
    serving_size: float
    serving_unit: str
    calories: float
    protein: float
    carbs: float
    fat: float


class MealRead(BaseModel):
    id: int
    name: str
    created_at: datetime | None = None
    foods: list[MealItemRead]
    total_calories: float
    total_protein: float
    total_carbs: float
    total_fat: float
