from pydantic_settings import BaseSettings

from fittrack.tracker.models import WeightUnit


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./fittrack.db"
    default_tz: str = "UTC"
    tracker_api_key: str | None = None

    # Weight unit captured by new sessions until the user sets a preference.
    default_weight_unit: WeightUnit = WeightUnit.kg

    # Google Fit step sync. The client id can be left unset to disable sync.
    google_fit_client_id: str | None = None
    google_fit_redirect_uri: str = "http://localhost:8000/tracker/steps/google-fit/callback"
    google_fit_timeout_s: float = 15.0

    # Activity figures derived from the day's step count
    steps_per_mile: float = 2000.0
    steps_to_kcal: float = 0.04  # kcal per step
    steps_per_move_minute: float = 100.0

    # Goal rings
    weekly_window_days: int = 7

    log_level: str = "INFO"
    log_file: str | None = None

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
