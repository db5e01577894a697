from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "Floris"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/floris"

    # Mount point for every router, e.g. "/api" behind the Vercel rewrite
    api_prefix: str = ""
    cors_origins: list[str] = ["*"]

    # Share links and share images are built from this base
    frontend_url: str = "https://floris-ebon.vercel.app"

    jwt_secret: str = "secret_key"
    jwt_algorithm: str = "HS256"

    starting_points: int = 100

    gacha_cost: int = 100
    gacha_rates: dict[str, float] = {"Common": 0.6, "Rare": 0.3, "Legendary": 0.1}

    share_ttl_hours: int = 24
    default_letter_style: str = "bg-rose-50"
    anonymous_sender_name: str = "익명의 정원사"

    # Owner of flowers created by the unauthenticated share flow
    guest_user_id: str = "guest"

    catalog_path: Path = Path(__file__).parent / "data" / "flowers.json"


settings = Settings()
