import os

from pydantic_settings import BaseSettings

DEFAULT_SERVICE_AREA_PATH = os.path.join(
    os.path.dirname(__file__), "..", "data", "auto_area.geojson"
)


class Settings(BaseSettings):
    PORT: int = 5000
    CORS_ORIGINS: str = "*"
    LOG_LEVEL: str = "INFO"

    # Auto-quote service area (Polygon/MultiPolygon GeoJSON)
    SERVICE_AREA_PATH: str = DEFAULT_SERVICE_AREA_PATH

    # Internal email — disabled unless all four SMTP values are set
    SMTP_HOST: str = ""
    SMTP_PORT: int = 0
    SMTP_USER: str = ""
    SMTP_PASS: str = ""
    SMTP_TIMEOUT_SECONDS: float = 20.0
    FROM_EMAIL: str = "no-reply@example.com"
    TO_EMAIL: str = "dev-inbox@example.com"

    # Google Sheets logging webhook — optional
    SHEETS_WEBHOOK_URL: str = ""
    WEBHOOK_TIMEOUT_SECONDS: float = 10.0

    class Config:
        env_file = ".env"

    @property
    def smtp_configured(self) -> bool:
        return bool(self.SMTP_HOST and self.SMTP_PORT and self.SMTP_USER and self.SMTP_PASS)

    @property
    def cors_origins_list(self) -> list:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


settings = Settings()
