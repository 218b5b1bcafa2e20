"""Food and meal catalog, and daily log entries derived from it.

Food macros are stored per 100 g. A meal is a list of foods, each with a
number of servings where one serving is the food's ``serving_size`` grams.
Log entries snapshot the scaled macros at logging time and keep the food
or meal id so the amount can be edited later.
"""
import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import DailyLog, Food, Meal, MealFood
from services.exceptions import LogEditError, NotFoundError

logger = logging.getLogger("services.catalog")

MACROS = ("calories", "protein", "carbs", "fat")


def scale_food(food: Food, grams: float) -> Dict[str, float]:
    """Macros of ``grams`` of a food."""
    ratio = grams / 100
    return {m: (getattr(food, m) or 0.0) * ratio for m in MACROS}


def meal_totals(items: Iterable[tuple[MealFood, Food]], servings: float = 1.0) -> Dict[str, float]:
    """Macros of ``servings`` portions of a meal."""
    totals = dict.fromkeys(MACROS, 0.0)
    for item, food in items:
        ratio = (food.serving_size or 100) / 100 * item.servings * servings
        for m in MACROS:
            totals[m] += (getattr(food, m) or 0.0) * ratio
    return totals


async def get_meal_items(session: AsyncSession, meal_id: int) -> list[tuple[MealFood, Food]]:
    stmt = (
        select(MealFood, Food)
        .join(Food, Food.id == MealFood.food_id)
        .where(MealFood.meal_id == meal_id)
        .order_by(MealFood.id.asc())
    )
    return [(item, food) for item, food in (await session.execute(stmt)).all()]


def _food_fields(serving_name: Optional[str], serving_grams: Optional[float]) -> Dict[str, Any]:
    # Without a named serving the food is measured in plain grams
    if serving_name:
        return {"serving_size": serving_grams or 100.0, "serving_unit": serving_name}
    return {"serving_size": 100.0, "serving_unit": "g"}


class CatalogService:
    """CRUD for foods and meals."""

    @staticmethod
    async def list_foods(session: AsyncSession) -> list[tuple[Food, Optional[datetime]]]:
        """Foods with the time they were last logged, most recently used first."""
        last_used = func.max(DailyLog.logged_at).label("last_used")
        stmt = (
            select(Food, last_used)
            .outerjoin(DailyLog, DailyLog.food_id == Food.id)
            .group_by(Food.id)
            .order_by(last_used.desc().nulls_last(), Food.created_at.desc(), Food.id.desc())
        )
        return [(food, used) for food, used in (await session.execute(stmt)).all()]

    @staticmethod
    async def get_food_by_barcode(session: AsyncSession, barcode: str) -> Optional[Food]:
        stmt = select(Food).where(Food.barcode == barcode).order_by(Food.id.asc()).limit(1)
        return (await session.execute(stmt)).scalar_one_or_none()

    @staticmethod
    async def create_food(
        session: AsyncSession,
        name: str,
        calories: float,
        protein: float,
        carbs: float,
        fat: float,
        serving_name: Optional[str] = None,
        serving_grams: Optional[float] = None,
        barcode: Optional[str] = None,
    ) -> Food:
        food = Food(
            name=name,
            calories=calories,
            protein=protein,
            carbs=carbs,
            fat=fat,
            barcode=barcode or None,
            **_food_fields(serving_name, serving_grams),
        )
        session.add(food)
        await session.commit()
        await session.refresh(food)
        logger.info(f"Created food {food.id}: {name}")
        return food

    @staticmethod
    async def update_food(
        session: AsyncSession,
        food_id: int,
        name: str,
        calories: float,
        protein: float,
        carbs: float,
        fat: float,
        serving_name: Optional[str] = None,
        serving_grams: Optional[float] = None,
        barcode: Optional[str] = None,
    ) -> Optional[Food]:
        """Returns None when the food does not exist. Past log entries keep their macros."""
        food = await session.get(Food, food_id)
        if food is None:
            return None

        food.name = name
        food.calories = calories
        food.protein = protein
        food.carbs = carbs
        food.fat = fat
        food.barcode = barcode or None
        for key, value in _food_fields(serving_name, serving_grams).items():
            setattr(food, key, value)
        await session.commit()
        await session.refresh(food)
        return food

    @staticmethod
    async def delete_food(session: AsyncSession, food_id: int) -> bool:
        """Removes the food from every meal too. Idempotent."""
        food = await session.get(Food, food_id)
        await session.execute(delete(MealFood).where(MealFood.food_id == food_id))
        if food is not None:
            await session.delete(food)
            logger.info(f"Deleted food {food_id}")
        await session.commit()
        return food is not None

    @staticmethod
    async def meal_view(session: AsyncSession, meal: Meal) -> Dict[str, Any]:
        items = await get_meal_items(session, meal.id)
        totals = meal_totals(items)
        return {
            "id": meal.id,
            "name": meal.name,
            "created_at": meal.created_at,
            "foods": [
                {
                    "food_id": food.id,
                    "name": food.name,
                    "servings": item.servings,
                    "serving_size": food.serving_size,
                    "serving_unit": food.serving_unit,
                    "calories": food.calories,
                    "protein": food.protein,
                    "carbs": food.carbs,
                    "fat": food.fat,
                }
                for item, food in items
            ],
            **{f"total_{m}": totals[m] for m in MACROS},
        }

    @staticmethod
    async def list_meals(session: AsyncSession) -> list[Dict[str, Any]]:
        stmt = select(Meal).order_by(Meal.created_at.desc(), Meal.id.desc())
        meals = (await session.execute(stmt)).scalars().all()
        return [await CatalogService.meal_view(session, meal) for meal in meals]

    @staticmethod
    async def _check_foods(session: AsyncSession, foods: list[tuple[int, float]]) -> None:
        for food_id, _ in foods:
            if await session.get(Food, food_id) is None:
                raise NotFoundError("Food", food_id)

    @staticmethod
    async def create_meal(session: AsyncSession, name: str, foods: list[tuple[int, float]]) -> Meal:
        """``foods`` is a list of (food_id, servings)."""
        await CatalogService._check_foods(session, foods)

        meal = Meal(name=name)
        session.add(meal)
        await session.flush()
        session.add_all(MealFood(meal_id=meal.id, food_id=f, servings=s) for f, s in foods)
        await session.commit()
        await session.refresh(meal)
        logger.info(f"Created meal {meal.id}: {name} ({len(foods)} foods)")
        return meal

    @staticmethod
    async def update_meal(
        session: AsyncSession,
        meal_id: int,
        name: Optional[str] = None,
        foods: Optional[list[tuple[int, float]]] = None,
    ) -> Optional[Meal]:
        """Rename and/or replace the food list. Returns None when the meal does not exist."""
        meal = await session.get(Meal, meal_id)
        if meal is None:
            return None

        if foods is not None:
            await CatalogService._check_foods(session, foods)
            await session.execute(delete(MealFood).where(MealFood.meal_id == meal_id))
            session.add_all(MealFood(meal_id=meal_id, food_id=f, servings=s) for f, s in foods)
        if name:
            meal.name = name
        await session.commit()
        await session.refresh(meal)
        return meal

    @staticmethod
    async def delete_meal(session: AsyncSession, meal_id: int) -> bool:
        """Idempotent; returns whether a row was removed."""
        meal = await session.get(Meal, meal_id)
        await session.execute(delete(MealFood).where(MealFood.meal_id == meal_id))
        if meal is not None:
            await session.delete(meal)
            logger.info(f"Deleted meal {meal_id}")
        await session.commit()
        return meal is not None


class LogService:
    """Daily log entries built from catalog items."""

    @staticmethod
    async def log_food(session: AsyncSession, food_id: int, grams: float, day: date) -> DailyLog:
        food = await session.get(Food, food_id)
        if food is None:
            raise NotFoundError("Food", food_id)

        entry = DailyLog(
            date=day,
            food_id=food.id,
            name=food.name,
            servings=grams,
            logged_at=datetime.now(),
            **scale_food(food, grams),
        )
        session.add(entry)
        await session.commit()
        await session.refresh(entry)
        return entry

    @staticmethod
    async def log_meal(session: AsyncSession, meal_id: int, servings: float, day: date) -> DailyLog:
        meal = await session.get(Meal, meal_id)
        if meal is None:
            raise NotFoundError("Meal", meal_id)

        items = await get_meal_items(session, meal_id)
        entry = DailyLog(
            date=day,
            meal_id=meal.id,
            name=meal.name,
            servings=servings,
            logged_at=datetime.now(),
            **meal_totals(items, servings),
        )
        session.add(entry)
        await session.commit()
        await session.refresh(entry)
        return entry

    @staticmethod
    async def update_servings(session: AsyncSession, entry_id: int, servings: float) -> DailyLog:
        """Change the amount of a logged food (grams) or meal (servings) and recompute macros."""
        entry = await session.get(DailyLog, entry_id)
        if entry is None:
            raise NotFoundError("Log entry", entry_id)

        if entry.food_id is not None:
            food = await session.get(Food, entry.food_id)
            if food is None:
                raise NotFoundError("Food", entry.food_id)
            macros = scale_food(food, servings)
        elif entry.meal_id is not None:
            macros = meal_totals(await get_meal_items(session, entry.meal_id), servings)
        else:
            raise LogEditError(f"Log entry {entry_id} has no food or meal to recompute from")

        entry.servings = servings
        for key, value in macros.items():
            setattr(entry, key, value)
        await session.commit()
        await session.refresh(entry)
        return entry
