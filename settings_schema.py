from typing import List

from pydantic import BaseModel, Field, ValidationError

class SettingsSchema(BaseModel):
    db_path: str = "exercise_tracker.db"
    host: str = "0.0.0.0"
    port: int = Field(3000, ge=1, le=65535)
    pool_size: int = Field(5, ge=1)
    pool_timeout: float = Field(5.0, gt=0)
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

def validate_settings(data: dict) -> SettingsSchema:
    try:
        return SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
