"""Service for calculating nutrition goals (BMR, TDEE, adaptive TDEE, macros)."""

from datetime import date, timedelta
from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, Mapping, Optional

from config import settings

ACTIVITY_MULTIPLIERS = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "very_active": 1.725,
    "extra_active": 1.9,
}

PHASE_MULTIPLIERS = {
    "cut": 0.80,
    "maintain": 1.0,
    "bulk": 1.15,
}

DEFAULT_ACTIVITY_MULTIPLIER = 1.55
DEFAULT_PHASE_MULTIPLIER = 1.0

WINDOW_DAYS = 7


def round_half_up(value: float, ndigits: int = 0):
    """Round halves towards positive infinity; returns int when ndigits is 0.

    -0.125 rounds to -0.12 and -2.5 to -2.
    """
    quantum = Decimal(1).scaleb(-ndigits)
    exact = Decimal(str(value))
    rounding = ROUND_HALF_UP if exact >= 0 else ROUND_HALF_DOWN
    rounded = exact.quantize(quantum, rounding=rounding)
    return int(rounded) if ndigits == 0 else float(rounded)


def _window(entries: Iterable[Any], start: date, end: date) -> tuple[Optional[float], int]:
    """Mean weight and entry count for entries logged on days in [start, end)."""
    weights = [e.weight_kg for e in entries if start <= e.logged_at.date() < end]
    if not weights:
        return None, 0
    return sum(weights) / len(weights), len(weights)


class NutritionCalculator:
    """Calculates BMR, TDEE, adaptive TDEE and macro splits from the profile."""

    @staticmethod
    def calculate_bmr(gender: str, weight_kg: float, height_cm: float, age: int) -> float:
        """Mifflin-St Jeor.

        BMR (Men) = 10*W + 6.25*H - 5*A + 5
        BMR (Women) = 10*W + 6.25*H - 5*A - 161
        """
        base = 10 * weight_kg + 6.25 * height_cm - 5 * age
        return base - 161 if gender == "female" else base + 5

    @staticmethod
    def calculate_macros(calories: int, weight_kg: float) -> Dict[str, int]:
        """Protein per kg of body weight, fat as a share of calories, carbs fill the rest."""
        protein = round_half_up(weight_kg * settings.PROTEIN_PER_KG)
        fat = round_half_up(calories * settings.FAT_CALORIE_SHARE / 9)
        # Very low calories can leave nothing for carbs
        carbs = max(0, round_half_up((calories - protein * 4 - fat * 9) / 4))
        return {"protein_g": protein, "fat_g": fat, "carbs_g": carbs}

    @staticmethod
    def window_averages(entries: Iterable[Any], today: date) -> tuple[Optional[float], int, Optional[float], int]:
        """(avg, count) for [today-7, today) followed by (avg, count) for [today-14, today-7)."""
        entries = list(entries)
        week_ago = today - timedelta(days=WINDOW_DAYS)
        avg_7d, count_7d = _window(entries, week_ago, today)
        avg_prev, count_prev = _window(entries, week_ago - timedelta(days=WINDOW_DAYS), week_ago)
        return avg_7d, count_7d, avg_prev, count_prev

    @staticmethod
    def weight_trend(entries: Iterable[Any], current_weight: float, today: date) -> Dict[str, Any]:
        """Compare the last 7 days of weigh-ins with the 7 days before."""
        avg_7d, count_7d, avg_prev, count_prev = NutritionCalculator.window_averages(entries, today)

        trend = {
            "current": current_weight,
            "avg_7d": round_half_up(avg_7d, 1) if avg_7d is not None else None,
            "avg_prev_7d": round_half_up(avg_prev, 1) if avg_prev is not None else None,
            "weekly_change_kg": None,
            "weekly_change_pct": None,
            "entries_7d": count_7d,
            "entries_prev_7d": count_prev,
        }
        if avg_7d is not None and avg_prev is not None:
            change = avg_7d - avg_prev
            trend["weekly_change_kg"] = round_half_up(change, 2)
            trend["weekly_change_pct"] = round_half_up(change / avg_prev * 100, 2)
        return trend

    @staticmethod
    def infer_tdee(daily_calories: Mapping[date, float], weekly_change_kg: float) -> int:
        """Back-solve maintenance calories from intake and observed weight change.

        Gaining on X kcal/day means the true burn is below X by the surplus
        that produced the gain, and symmetrically for a loss.
        """
        avg_daily_intake = sum(daily_calories.values()) / len(daily_calories)
        daily_surplus = weekly_change_kg * settings.KCAL_PER_KG / WINDOW_DAYS
        return round_half_up(avg_daily_intake - daily_surplus)

    @staticmethod
    def calculate_breakdown(
        profile: Any,
        weight_kg: Optional[float],
        phase: str,
        stabilization: Dict[str, Any],
        weight_entries: Iterable[Any],
        daily_calories: Mapping[date, float],
        today: date,
    ) -> Dict[str, Any]:
        """Full target breakdown for ``today``.

        ``weight_entries`` are body-weight rows from the last 14 days and
        ``daily_calories`` maps each logged day of the last 7 to its
        calorie total. Never raises for missing data; the reason the
        adaptive estimate is absent is reported in ``data_status``.
        """
        activity_mult = ACTIVITY_MULTIPLIERS.get(profile.activity_level, DEFAULT_ACTIVITY_MULTIPLIER)
        phase_mult = PHASE_MULTIPLIERS.get(phase, DEFAULT_PHASE_MULTIPLIER)

        result: Dict[str, Any] = {
            "bmr": None,
            "base_tdee": None,
            "activity_multiplier": activity_mult,
            "phase": phase,
            "phase_multiplier": phase_mult,
            "formula_calories": None,
            "inferred_tdee": None,
            "adaptive_calories": None,
            "final_calories": None,
            "protein_g": None,
            "fat_g": None,
            "carbs_g": None,
            "weight_trend": None,
            "data_status": "no_weight",
            "stabilization": stabilization,
        }
        if weight_kg is None:
            return result

        bmr = NutritionCalculator.calculate_bmr(profile.gender, weight_kg, profile.height_cm, profile.age)
        base_tdee = round_half_up(bmr * activity_mult)
        formula_calories = round_half_up(base_tdee * phase_mult)
        weight_entries = list(weight_entries)
        trend = NutritionCalculator.weight_trend(weight_entries, weight_kg, today)
        avg_7d, _, avg_prev, _ = NutritionCalculator.window_averages(weight_entries, today)
        # Back-solve from the unrounded difference, the trend only shows 2 decimals
        raw_change = avg_7d - avg_prev if avg_7d is not None and avg_prev is not None else None

        inferred_tdee = None
        adaptive_calories = None
        if stabilization.get("in_stabilization"):
            data_status = "stabilization"
        else:
            data_status = "formula_only"
            enough_logs = len(daily_calories) >= settings.ADAPTIVE_MIN_LOG_DAYS
            enough_weights = (
                trend["entries_7d"] >= settings.ADAPTIVE_MIN_WEIGHT_ENTRIES
                and trend["entries_prev_7d"] >= settings.ADAPTIVE_MIN_WEIGHT_ENTRIES
            )
            if enough_logs and enough_weights and raw_change is not None:
                inferred_tdee = NutritionCalculator.infer_tdee(daily_calories, raw_change)
                adaptive_calories = round_half_up(inferred_tdee * phase_mult)
                if adaptive_calories > 0:
                    data_status = "adaptive"
                else:
                    # Under-logged intake; the estimate is unusable as a target
                    inferred_tdee = None
                    adaptive_calories = None

        final_calories = adaptive_calories if adaptive_calories is not None else formula_calories

        result.update(
            bmr=round_half_up(bmr),
            base_tdee=base_tdee,
            formula_calories=formula_calories,
            inferred_tdee=inferred_tdee,
            adaptive_calories=adaptive_calories,
            final_calories=final_calories,
            weight_trend=trend,
            data_status=data_status,
        )
        result.update(NutritionCalculator.calculate_macros(final_calories, weight_kg))
        return result
