from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # --- Required Fields ---
    PROJECT_NAME: str = "Bollywood_Takeaway"
    DATABASE_URL: str
    REDIS_URL: str

    # --- Service hours & pickup slots ---
    TIMEZONE: str = "Europe/Paris"
    OPENING_TIME: str = "11:00"
    LAST_SLOT_TIME: str = "21:45"  # last bookable start, kitchen closes at 22:00
    SLOT_MINUTES: int = 15
    LEAD_MINUTES: int = 30
    BOOKING_HORIZON_DAYS: int = 7

    # --- Optional / Default Fields ---
    CART_TTL_SECONDS: int = 3600
    MENU_PATH: str = "data/menu.json"
    LOG_LEVEL: str = "INFO"

    # --- Staff alerts (disabled when missing) ---
    TWILIO_ACCOUNT_SID: str | None = None
    TWILIO_AUTH_TOKEN: str | None = None
    TWILIO_FROM_NUMBER: str | None = None
    ADMIN_PHONE_NUMBER: str | None = None

    POSTGRES_USER: str | None = None
    POSTGRES_PASSWORD: str | None = None
    POSTGRES_DB: str | None = None

    # --- Configuration ---
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"  # docker-compose shares the same .env with the database container
    )

settings = Settings()
