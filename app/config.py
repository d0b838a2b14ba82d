from pydantic_settings import BaseSettings

from app.engine.models import BoundaryMissPolicy


class Settings(BaseSettings):
    database_url: str = "postgresql+asyncpg://localhost:5432/goalengine"
    default_tz: str = "UTC"
    engine_api_key: str | None = None
    log_level: str = "INFO"

    # Non-daily goal that reaches its boundary unmet: "missed" right away, or
    # left as evaluation_day until the expiry check settles it.
    boundary_miss_policy: BoundaryMissPolicy = BoundaryMissPolicy.deferred_to_expiry

    # Discrete "average" tracking: share of logged days that must match (strictly above).
    discrete_majority_threshold: float = 0.5

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
