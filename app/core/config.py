from pydantic_settings import BaseSettings
from typing import List
import os
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    # App Settings
    APP_NAME: str = os.getenv("APP_NAME", "ProfileAvailability")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # MongoDB Settings
    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    DB_NAME: str = os.getenv("DB_NAME", "profile_availability_db")

    # JWT Auth
    SECRET_KEY: str = os.getenv("SECRET_KEY", "your_secret_key_here")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))
    AUTH_TOKEN_URL: str = os.getenv("AUTH_TOKEN_URL", "/auth/login")

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",  # web frontend
        "http://localhost:8080",  # booking widget
    ]

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
