# backend/config.py

import os
from pathlib import Path
from dotenv import load_dotenv
from pydantic import BaseModel


load_dotenv()


TRUE_STRINGS = ("true", "on", "yes", "1")


def string_to_boolean(value: str | bool) -> bool:
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() in TRUE_STRINGS


class Settings(BaseModel):
    """
    Runtime configuration read from the environment (and `.env`).
    """
    port: int = 8080
    host: str = "127.0.0.1"
    logger: bool = True
    database_url: str = "sqlite:///./data/app.db"
    frontend_dir: Path = Path.cwd() / ".." / "frontend" / "dist"
    keys_dir: Path = Path("data/keys")
    jwt_secret_key: str | None = None
    token_expire_minutes: int = 60
    cors_origins: list[str] = []

    model_config = {"frozen": True}


def load_settings() -> Settings:
    env = os.environ
    values = {
        "port": int(env.get("PORT") or 8080),
        "logger": string_to_boolean(env.get("LOGGER", True)),
        "cors_origins": [o.strip() for o in env.get("CORS_ORIGINS", "").split(",") if o.strip()],
    }
    optional = {
        "host": "HOST",
        "database_url": "DATABASE_URL",
        "frontend_dir": "FRONTEND_DIR",
        "keys_dir": "KEYS_DIR",
        "jwt_secret_key": "JWT_SECRET_KEY",
        "token_expire_minutes": "TOKEN_EXPIRE_MINUTES",
    }
    for field, name in optional.items():
        if env.get(name):
            values[field] = env[name]
    return Settings(**values)
