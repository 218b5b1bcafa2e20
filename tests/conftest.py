"""
Pytest fixtures for Adaptus tests.
"""
import os
from datetime import date, datetime, timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Set test environment variables before importing modules
os.environ['DATABASE_URL'] = "sqlite+aiosqlite:///:memory:"
os.environ['LOG_FILE'] = ""

# Import all models to ensure they are registered with Base.metadata
from database.base import Base, get_db
from database.models import (
    BodyWeight,
    DailyLog,
    Food,
    Meal,
    MealFood,
    NutritionTargets,
    Phase,
    UserProfile,
    seed_defaults,
)

# In-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Fixed "today" so windows and phase boundaries are deterministic
TODAY = date(2025, 3, 15)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture(scope="function")
async def db_session():
    """Create an in-memory SQLite database session with the singleton rows seeded."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async_session = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    # Creates: user_profile, body_weight, daily_log, foods, meals, meal_foods, phases, nutrition_targets
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        await seed_defaults(session)
        yield session
        await session.rollback()

    # Cleanup
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def sample_profile(db_session):
    """Male, 28y, 183cm, moderately active."""
    profile = await db_session.get(UserProfile, 1)
    profile.gender = "male"
    profile.age = 28
    profile.height_cm = 183.0
    profile.activity_level = "moderate"
    await db_session.commit()
    await db_session.refresh(profile)
    return profile


@pytest.fixture
async def two_week_weights(db_session):
    """80.0 kg twice in the previous week, 79.5 kg twice in the last week."""
    entries = [
        BodyWeight(weight_kg=80.0, logged_at=datetime(2025, 3, 2, 7, 30)),
        BodyWeight(weight_kg=80.0, logged_at=datetime(2025, 3, 5, 7, 30)),
        BodyWeight(weight_kg=79.5, logged_at=datetime(2025, 3, 9, 7, 30)),
        BodyWeight(weight_kg=79.5, logged_at=datetime(2025, 3, 13, 7, 30)),
    ]
    db_session.add_all(entries)
    await db_session.commit()
    return entries


@pytest.fixture
def log_calories(db_session):
    """Adds one log entry per day for the ``days`` days before ``end``."""

    async def add(days: int, calories: float = 2000.0, end: date = TODAY):
        for offset in range(1, days + 1):
            db_session.add(
                DailyLog(
                    date=end - timedelta(days=offset),
                    name="Meal",
                    calories=calories,
                    protein=150.0,
                    carbs=200.0,
                    fat=60.0,
                )
            )
        await db_session.commit()

    return add


@pytest.fixture
async def full_week_logs(log_calories):
    await log_calories(7)


@pytest.fixture
async def bulk_to_cut(db_session):
    """Bulk until 10 March, cut from 10 March onwards."""
    phases = [
        Phase(phase_type="bulk", start_date=date(2025, 2, 1), end_date=date(2025, 3, 10)),
        Phase(phase_type="cut", start_date=date(2025, 3, 10), end_date=date(2025, 4, 30)),
    ]
    db_session.add_all(phases)
    await db_session.commit()
    return phases


@pytest.fixture
async def pantry(db_session):
    """Two foods and a breakfast meal of two cups of oats and one portion of chicken.

    One breakfast serving comes to 600 kcal, 40 P, 70 C, 15 F.
    """
    oats = Food(name="Oats", calories=400.0, protein=10.0, carbs=70.0, fat=5.0,
                serving_size=50.0, serving_unit="cup", barcode="5000001")
    chicken = Food(name="Chicken breast", calories=200.0, protein=30.0, carbs=0.0, fat=10.0,
                   serving_size=100.0, serving_unit="g")
    breakfast = Meal(name="Breakfast")
    db_session.add_all([oats, chicken, breakfast])
    await db_session.flush()
    db_session.add_all([
        MealFood(meal_id=breakfast.id, food_id=oats.id, servings=2.0),
        MealFood(meal_id=breakfast.id, food_id=chicken.id, servings=1.0),
    ])
    await db_session.commit()
    return {"oats": oats, "chicken": chicken, "breakfast": breakfast}


@pytest.fixture
async def client(db_session):
    """HTTP client bound to the app with the test session injected."""
    from api.main import app

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
