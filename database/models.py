from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.ext.asyncio import AsyncSession

from database.base import Base

SINGLETON_ID = 1

PROFILE_DEFAULTS = {
    "gender": "male",
    "age": 25,
    "height_cm": 175.0,
    "activity_level": "moderate",
}

TARGET_DEFAULTS = {
    "calories": 2500,
    "protein": 180,
    "carbs": 250,
    "fat": 80,
}


class UserProfile(Base):
    __tablename__ = "user_profile"
    id = Column(Integer, primary_key=True, default=SINGLETON_ID)
    gender = Column(String, nullable=False, default="male")
    age = Column(Integer, nullable=False, default=25)
    height_cm = Column(Float, nullable=False, default=175.0)
    activity_level = Column(String, nullable=False, default="moderate")
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    __table_args__ = (CheckConstraint("id = 1", name="ck_user_profile_singleton"),)


class BodyWeight(Base):
    __tablename__ = "body_weight"
    id = Column(Integer, primary_key=True, autoincrement=True)
    weight_kg = Column(Float, nullable=False)
    logged_at = Column(DateTime, nullable=False, default=datetime.now, index=True)


class DailyLog(Base):
    __tablename__ = "daily_log"
    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False, index=True)
    # Catalog reference; null for free-form entries
    food_id = Column(Integer, nullable=True)
    meal_id = Column(Integer, nullable=True)
    # Grams for a food entry, servings for a meal entry
    servings = Column(Float, nullable=True)
    name = Column(String, nullable=False)
    calories = Column(Float, default=0.0)
    protein = Column(Float, default=0.0)
    carbs = Column(Float, default=0.0)
    fat = Column(Float, default=0.0)
    logged_at = Column(DateTime, default=datetime.now)


class Food(Base):
    __tablename__ = "foods"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    # Macros per 100 g
    calories = Column(Float, default=0.0)
    protein = Column(Float, default=0.0)
    carbs = Column(Float, default=0.0)
    fat = Column(Float, default=0.0)
    serving_size = Column(Float, default=100.0)  # grams in one serving
    serving_unit = Column(String, default="g")
    barcode = Column(String, nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.now)


class Meal(Base):
    __tablename__ = "meals"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.now)


class MealFood(Base):
    __tablename__ = "meal_foods"
    id = Column(Integer, primary_key=True, autoincrement=True)
    meal_id = Column(Integer, ForeignKey("meals.id"), nullable=False, index=True)
    food_id = Column(Integer, ForeignKey("foods.id"), nullable=False)
    servings = Column(Float, nullable=False, default=1.0)


class Phase(Base):
    __tablename__ = "phases"
    id = Column(Integer, primary_key=True, autoincrement=True)
    phase_type = Column(String, nullable=False)  # cut | maintain | bulk
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)      # exclusive
    created_at = Column(DateTime, default=datetime.now)

    __table_args__ = (CheckConstraint("start_date < end_date", name="ck_phases_range"),)


class NutritionTargets(Base):
    __tablename__ = "nutrition_targets"
    id = Column(Integer, primary_key=True, default=SINGLETON_ID)
    calories = Column(Integer, nullable=False, default=2500)
    protein = Column(Integer, nullable=False, default=180)
    carbs = Column(Integer, nullable=False, default=250)
    fat = Column(Integer, nullable=False, default=80)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    __table_args__ = (CheckConstraint("id = 1", name="ck_nutrition_targets_singleton"),)


async def get_profile(session: AsyncSession) -> UserProfile:
    """The profile singleton, created with defaults on first access."""
    profile = await session.get(UserProfile, SINGLETON_ID)
    if profile is None:
        profile = UserProfile(id=SINGLETON_ID, **PROFILE_DEFAULTS)
        session.add(profile)
        await session.flush()
    return profile


async def get_targets(session: AsyncSession) -> NutritionTargets:
    """The cached targets singleton, created with defaults on first access."""
    targets = await session.get(NutritionTargets, SINGLETON_ID)
    if targets is None:
        targets = NutritionTargets(id=SINGLETON_ID, **TARGET_DEFAULTS)
        session.add(targets)
        await session.flush()
    return targets


async def seed_defaults(session: AsyncSession) -> None:
    """Create the profile and targets singleton rows if they are missing."""
    await get_profile(session)
    await get_targets(session)
    await session.commit()
