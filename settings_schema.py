from typing import Literal

from pydantic import BaseModel, Field, ValidationError


class SettingsSchema(BaseModel):
    first_weekday: int = Field(2, ge=1, le=7)
    weight_unit: Literal["kg", "lb"] = "kg"
    language: Literal["en", "sl"] = "en"


def validate_settings(data: dict) -> None:
    try:
        SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
