from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./adaptus.db"
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "adaptus.log"

    # Adaptive TDEE model
    STABILIZATION_DAYS: int = 10      # water/glycogen swing after an intake step change
    KCAL_PER_KG: float = 7700.0       # energy content of 1 kg body-mass change
    ADAPTIVE_MIN_LOG_DAYS: int = 7
    ADAPTIVE_MIN_WEIGHT_ENTRIES: int = 2
    PROTEIN_PER_KG: float = 2.2
    FAT_CALORIE_SHARE: float = 0.25
    TARGET_REFRESH_THRESHOLD_KCAL: int = 50

    # Paths
    BASE_DIR: Path = Path(__file__).resolve().parent

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

# Force loading .env from the same directory as config.py
settings = Settings(_env_file=Path(__file__).resolve().parent / ".env")
