from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional


class Settings:
    """Centralized configuration for the dietitian backend."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        repo_root = base_dir.parent
        data_root_default = repo_root / "data"

        self.data_root: Path = Path(
            os.environ.get("DIETITIAN_DATA_ROOT") or data_root_default
        ).expanduser()
        self.app_db_path: Path = Path(
            os.environ.get("DIETITIAN_DB_PATH") or (self.data_root / "dietitian.db")
        ).expanduser()
        self.local_bookmarks_path: Path = Path(
            os.environ.get("DIETITIAN_LOCAL_BOOKMARKS")
            or (self.data_root / "local" / "bookmarks.json")
        ).expanduser()
        # In production you MUST set DIETITIAN_JWT_SECRET; tokens are minted by the identity provider.
        self.jwt_secret: str = os.environ.get("DIETITIAN_JWT_SECRET") or "dev-secret-change-me"
        self.token_ttl_days: int = int(os.environ.get("DIETITIAN_TOKEN_TTL_DAYS") or "7")
        self.log_level: str = (os.environ.get("DIETITIAN_LOG_LEVEL") or "INFO").upper()

        # ---- Recipe source ----
        self.recipe_api_base_url: str = os.environ.get(
            "RECIPE_API_BASE_URL", "https://api.spoonacular.com"
        )
        self.recipe_api_key: Optional[str] = os.environ.get("RECIPE_API_KEY")
        self.recipe_api_timeout: float = float(os.environ.get("RECIPE_API_TIMEOUT", "10"))

        # ---- Food facts ----
        self.food_facts_base_url: str = os.environ.get(
            "FOOD_FACTS_BASE_URL", "https://world.openfoodfacts.org"
        )
        self.food_facts_timeout: float = float(os.environ.get("FOOD_FACTS_TIMEOUT", "10"))

        # ---- Assistant (OpenAI-compatible chat API) ----
        self.llm_api_key: Optional[str] = os.environ.get("LLM_API_KEY")
        self.llm_base_url: str = os.environ.get("LLM_BASE_URL", "https://api.openai.com/v1")
        self.llm_model: str = os.environ.get("LLM_MODEL", "gpt-4o-mini")
        self.llm_timeout: float = float(os.environ.get("LLM_TIMEOUT", "30"))
        self.llm_max_tokens: int = int(os.environ.get("LLM_MAX_TOKENS", "512"))
        self.llm_temperature: float = float(os.environ.get("LLM_TEMPERATURE", "0.7"))

        cors = os.environ.get("DIETITIAN_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]


settings = Settings()
