from pydantic_settings import BaseSettings
from typing import List
import json


class Settings(BaseSettings):
    # Application
    app_name: str = "Launchpad Token Sale API"
    debug: bool = False
    api_v1_prefix: str = "/api/v1"

    # Sale accounts (EVM-style addresses)
    # Owner is the only address allowed to add projects
    owner_address: str = "0x0000000000000000000000000000000000000001"
    usdc_address: str = "0x00000000000000000000000000000000000000c1"
    usdt_address: str = "0x00000000000000000000000000000000000000d1"
    # Account holding attached native value while a purchase runs
    sale_address: str = "0x00000000000000000000000000000000000000a1"

    # Oracle
    native_price_key: str = "ASTR/USD"
    # Reject oracle values older than this many seconds (0 disables the check)
    oracle_max_age_seconds: int = 0

    # DIA price feeder
    dia_api_url: str = "https://api.diadata.org/v1"
    dia_asset_symbol: str = "ASTR"
    price_feed_enabled: bool = False
    price_feed_interval_seconds: int = 60

    # Owner and buyer login challenges
    auth_message_ttl_seconds: int = 300

    # Database (Tortoise ORM format)
    database_url: str = "sqlite://launchpad.sqlite3"
    generate_schemas: bool = True

    @property
    def tortoise_config(self) -> dict:
        """Tortoise ORM configuration."""
        return {
            "connections": {
                "default": self.database_url,
            },
            "apps": {
                "models": {
                    "models": ["launchpad.models.sale"],
                    "default_connection": "default",
                },
            },
        }

    # CORS
    cors_origins: str = '["http://localhost:3000","http://localhost:8080"]'

    @property
    def cors_origins_list(self) -> List[str]:
        return json.loads(self.cors_origins)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


settings = Settings()
