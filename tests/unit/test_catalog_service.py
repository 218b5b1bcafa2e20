"""Unit tests for CatalogService and LogService."""
import pytest
from sqlalchemy import select

from database.models import DailyLog, MealFood
from services.catalog import CatalogService, LogService, get_meal_items, meal_totals, scale_food
from services.exceptions import LogEditError, NotFoundError


def macros(entry):
    return (entry.calories, entry.protein, entry.carbs, entry.fat)


class TestScaling:
    """Tests for the macro scaling helpers."""

    @pytest.mark.asyncio
    async def test_scale_food_per_100g(self, pantry):
        assert scale_food(pantry["chicken"], 150) == {
            "calories": 300.0, "protein": 45.0, "carbs": 0.0, "fat": 15.0,
        }

    @pytest.mark.asyncio
    async def test_meal_totals_use_serving_size(self, db_session, pantry):
        items = await get_meal_items(db_session, pantry["breakfast"].id)
        assert meal_totals(items) == {"calories": 600.0, "protein": 40.0, "carbs": 70.0, "fat": 15.0}
        assert meal_totals(items, 1.5)["fat"] == 22.5


class TestFoods:
    """Tests for food CRUD."""

    @pytest.mark.asyncio
    async def test_create_without_named_serving_is_grams(self, db_session):
        food = await CatalogService.create_food(
            db_session, "Rice", 130, 2.7, 28, 0.3, serving_grams=180
        )
        assert (food.serving_size, food.serving_unit) == (100.0, "g")
        assert food.barcode is None

    @pytest.mark.asyncio
    async def test_create_with_named_serving(self, db_session):
        food = await CatalogService.create_food(
            db_session, "Egg", 143, 12.6, 0.7, 9.5, serving_name="egg", serving_grams=60, barcode="123"
        )
        assert (food.serving_size, food.serving_unit) == (60, "egg")

    @pytest.mark.asyncio
    async def test_barcode_lookup(self, db_session, pantry):
        assert (await CatalogService.get_food_by_barcode(db_session, "5000001")).name == "Oats"
        assert await CatalogService.get_food_by_barcode(db_session, "nope") is None

    @pytest.mark.asyncio
    async def test_list_most_recently_used_first(self, db_session, pantry, today):
        rows = await CatalogService.list_foods(db_session)
        assert [food.name for food, _ in rows] == ["Chicken breast", "Oats"]
        assert all(used is None for _, used in rows)

        await LogService.log_food(db_session, pantry["oats"].id, 80, today)
        rows = await CatalogService.list_foods(db_session)
        assert [food.name for food, _ in rows] == ["Oats", "Chicken breast"]
        assert rows[0][1] is not None

    @pytest.mark.asyncio
    async def test_update_missing(self, db_session):
        assert await CatalogService.update_food(db_session, 99, "X", 0, 0, 0, 0) is None

    @pytest.mark.asyncio
    async def test_update_keeps_logged_macros(self, db_session, pantry, today):
        chicken = pantry["chicken"]
        entry = await LogService.log_food(db_session, chicken.id, 100, today)
        await CatalogService.update_food(db_session, chicken.id, "Chicken thigh", 250, 25, 0, 15)
        await db_session.refresh(entry)
        assert macros(entry) == (200.0, 30.0, 0.0, 10.0)

    @pytest.mark.asyncio
    async def test_delete_removes_from_meals(self, db_session, pantry):
        assert await CatalogService.delete_food(db_session, pantry["chicken"].id) is True
        assert await CatalogService.delete_food(db_session, pantry["chicken"].id) is False

        items = (await db_session.execute(select(MealFood))).scalars().all()
        assert [i.food_id for i in items] == [pantry["oats"].id]
        view = await CatalogService.meal_view(db_session, pantry["breakfast"])
        assert view["total_calories"] == 400.0


class TestMeals:
    """Tests for meal CRUD."""

    @pytest.mark.asyncio
    async def test_list_with_totals(self, db_session, pantry):
        meals = await CatalogService.list_meals(db_session)
        assert len(meals) == 1
        assert [f["name"] for f in meals[0]["foods"]] == ["Oats", "Chicken breast"]
        assert meals[0]["total_protein"] == 40.0

    @pytest.mark.asyncio
    async def test_create_rejects_unknown_food(self, db_session, pantry):
        with pytest.raises(NotFoundError):
            await CatalogService.create_meal(db_session, "Lunch", [(pantry["oats"].id, 1.0), (404, 1.0)])
        assert len(await CatalogService.list_meals(db_session)) == 1

    @pytest.mark.asyncio
    async def test_update_replaces_foods(self, db_session, pantry):
        breakfast = pantry["breakfast"]
        meal = await CatalogService.update_meal(
            db_session, breakfast.id, foods=[(pantry["chicken"].id, 2.0)]
        )
        assert meal.name == "Breakfast"
        view = await CatalogService.meal_view(db_session, meal)
        assert view["total_calories"] == 400.0

    @pytest.mark.asyncio
    async def test_rename_only_keeps_foods(self, db_session, pantry):
        meal = await CatalogService.update_meal(db_session, pantry["breakfast"].id, name="Brunch")
        view = await CatalogService.meal_view(db_session, meal)
        assert view["name"] == "Brunch"
        assert len(view["foods"]) == 2

    @pytest.mark.asyncio
    async def test_update_missing(self, db_session):
        assert await CatalogService.update_meal(db_session, 99, name="X") is None

    @pytest.mark.asyncio
    async def test_delete(self, db_session, pantry):
        assert await CatalogService.delete_meal(db_session, pantry["breakfast"].id) is True
        assert (await db_session.execute(select(MealFood))).scalars().all() == []
        assert await CatalogService.delete_meal(db_session, pantry["breakfast"].id) is False


class TestLogService:
    """Tests for log entries built from the catalog."""

    @pytest.mark.asyncio
    async def test_log_food(self, db_session, pantry, today):
        entry = await LogService.log_food(db_session, pantry["chicken"].id, 150, today)
        assert entry.name == "Chicken breast"
        assert (entry.food_id, entry.meal_id, entry.servings) == (pantry["chicken"].id, None, 150)
        assert macros(entry) == (300.0, 45.0, 0.0, 15.0)

    @pytest.mark.asyncio
    async def test_log_meal(self, db_session, pantry, today):
        entry = await LogService.log_meal(db_session, pantry["breakfast"].id, 1.5, today)
        assert entry.meal_id == pantry["breakfast"].id
        assert macros(entry) == (900.0, 60.0, 105.0, 22.5)

    @pytest.mark.asyncio
    async def test_log_unknown(self, db_session, today):
        with pytest.raises(NotFoundError):
            await LogService.log_food(db_session, 1, 100, today)
        with pytest.raises(NotFoundError):
            await LogService.log_meal(db_session, 1, 1, today)

    @pytest.mark.asyncio
    async def test_update_food_entry_grams(self, db_session, pantry, today):
        entry = await LogService.log_food(db_session, pantry["oats"].id, 50, today)
        entry = await LogService.update_servings(db_session, entry.id, 100)
        assert entry.servings == 100
        assert macros(entry) == (400.0, 10.0, 70.0, 5.0)

    @pytest.mark.asyncio
    async def test_update_meal_entry_servings(self, db_session, pantry, today):
        entry = await LogService.log_meal(db_session, pantry["breakfast"].id, 1, today)
        entry = await LogService.update_servings(db_session, entry.id, 2)
        assert macros(entry) == (1200.0, 80.0, 140.0, 30.0)

    @pytest.mark.asyncio
    async def test_update_free_form_entry(self, db_session, log_calories):
        await log_calories(1)
        entry = (await db_session.execute(select(DailyLog))).scalars().first()
        with pytest.raises(LogEditError):
            await LogService.update_servings(db_session, entry.id, 2)

    @pytest.mark.asyncio
    async def test_update_after_food_deleted(self, db_session, pantry, today):
        entry = await LogService.log_food(db_session, pantry["chicken"].id, 100, today)
        await CatalogService.delete_food(db_session, pantry["chicken"].id)
        with pytest.raises(NotFoundError):
            await LogService.update_servings(db_session, entry.id, 200)

    @pytest.mark.asyncio
    async def test_update_missing_entry(self, db_session):
        with pytest.raises(NotFoundError):
            await LogService.update_servings(db_session, 12345, 1)
