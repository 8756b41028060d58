from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    database_url: str = "sqlite:///./shift_roster.db"
    timezone: str = "Asia/Tokyo"  # used only to default an unspecified month
    prune_batch_size: int = 100
    log_level: str = "INFO"
    # Comma-separated, e.g. "http://localhost:3000,https://roster.example.com"
    cors_origins: str = ""

    class Config:
        env_file = ".env"

settings = Settings()
