"""Food and meal catalog router for the Adaptus API."""
from fastapi import APIRouter, HTTPException

from api.dependencies import DBSession
from api.schemas import FoodRead, FoodWrite, MealRead, MealUpdate, MealWrite
from services.catalog import CatalogService
from services.exceptions import NotFoundError

router = APIRouter()


def _food_read(food, last_used=None) -> FoodRead:
    read = FoodRead.model_validate(food)
    read.last_used = last_used
    return read


# === Foods ===
@router.get("/foods", response_model=list[FoodRead])
async def list_foods(session: DBSession):
    """All foods, most recently logged first."""
    rows = await CatalogService.list_foods(session)
    return [_food_read(food, last_used) for food, last_used in rows]


@router.get("/foods/barcode/{barcode}", response_model=FoodRead | None)
async def food_by_barcode(barcode: str, session: DBSession):
    """Look up a food by barcode, or null."""
    food = await CatalogService.get_food_by_barcode(session, barcode)
    return _food_read(food) if food else None


@router.post("/foods", response_model=FoodRead, status_code=201)
async def create_food(data: FoodWrite, session: DBSession):
    """Create a food; macros are per 100 g."""
    food = await CatalogService.create_food(session, **data.model_dump())
    return _food_read(food)


@router.put("/foods/{food_id}", response_model=FoodRead)
async def update_food(food_id: int, data: FoodWrite, session: DBSession):
    food = await CatalogService.update_food(session, food_id, **data.model_dump())
    if food is None:
        raise HTTPException(status_code=404, detail="Food not found")
    return _food_read(food)


@router.delete("/foods/{food_id}", status_code=204)
async def delete_food(food_id: int, session: DBSession):
    """Delete a food and drop it from every meal."""
    await CatalogService.delete_food(session, food_id)


# === Meals ===
@router.get("/meals", response_model=list[MealRead])
async def list_meals(session: DBSession):
    """All meals with their foods and per-serving totals."""
    return [MealRead(**view) for view in await CatalogService.list_meals(session)]


@router.post("/meals", response_model=MealRead, status_code=201)
async def create_meal(data: MealWrite, session: DBSession):
    try:
        meal = await CatalogService.create_meal(
            session, data.name, [(f.food_id, f.servings) for f in data.foods]
        )
    except NotFoundError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return MealRead(**await CatalogService.meal_view(session, meal))


@router.put("/meals/{meal_id}", response_model=MealRead)
async def update_meal(meal_id: int, data: MealUpdate, session: DBSession):
    """Rename a meal and/or replace its food list."""
    foods = [(f.food_id, f.servings) for f in data.foods] if data.foods is not None else None
    try:
        meal = await CatalogService.update_meal(session, meal_id, data.name, foods)
    except NotFoundError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if meal is None:
        raise HTTPException(status_code=404, detail="Meal not found")
    return MealRead(**await CatalogService.meal_view(session, meal))


@router.delete("/meals/{meal_id}", status_code=204)
async def delete_meal(meal_id: int, session: DBSession):
    await CatalogService.delete_meal(session, meal_id)
