from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings

API_BASE_URLS = {
    "development": "http://localhost:3000/api",
    "production": "https://minted-api.vercel.app/api",
}


class Settings(BaseSettings):
    app_name: str = "Minted"
    debug: bool = False

    # API
    environment: Literal["development", "production"] = "production"
    api_base_url: str = ""  # overrides the environment's URL when set

    # Headers expected by the hosted deployment
    api_host: str = "minted-api.vercel.app"
    user_agent: str = "MintedUI/1.0"

    # Auth
    session_token: str = ""

    model_config = {
        "env_file": str(Path(__file__).resolve().parent.parent.parent / ".env"),
        "env_prefix": "MINTED_",
    }

    @property
    def base_url(self) -> str:
        url = self.api_base_url or API_BASE_URLS[self.environment]
        return url.rstrip("/")


settings = Settings()
