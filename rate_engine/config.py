from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Money
    default_currency: str = "GBP"
    money_decimal_places: int = 2

    # Logging
    log_level: str = "INFO"
    log_file: str = ""

    # API
    api_prefix: str = "/api"
    cors_origins: str = "http://localhost:3000"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    model_config = {
        "env_prefix": "RATE_ENGINE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
