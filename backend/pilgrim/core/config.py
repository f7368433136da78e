from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Database
    database_url: str = "sqlite:///./pilgrim.db"

    # Timezone used to decide what "today" means for shift schedules
    TIMEZONE: str = "Asia/Ho_Chi_Minh"

    LOG_LEVEL: str = "INFO"

    # Listing
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    # Rejection reasons are stored in a String(1000) column
    REASON_MAX_LENGTH: int = 1000

    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.TIMEZONE)

settings = Settings()
