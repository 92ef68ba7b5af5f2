"""Sleep record schemas: one record per user per night."""

import datetime as dt

from pydantic import Field, model_validator

from app.schemas.base import CamelModel


class SleepRecordCreate(CamelModel):
    date: dt.date
    total_sleep_minutes: int = Field(ge=0, le=24 * 60)
    deep_sleep_minutes: int | None = Field(None, ge=0, le=24 * 60)
    rem_sleep_minutes: int | None = Field(None, ge=0, le=24 * 60)
    light_sleep_minutes: int | None = Field(None, ge=0, le=24 * 60)
    efficiency: float | None = Field(None, ge=0, le=100)
    resting_heart_rate: float | None = Field(None, ge=0, le=250)
    source: str = Field("manual", max_length=32)

    @model_validator(mode="after")
    def stages_fit_total(self) -> "SleepRecordCreate":
        stages = (
            self.deep_sleep_minutes, self.rem_sleep_minutes, self.light_sleep_minutes,
        )
        if sum(s for s in stages if s is not None) > self.total_sleep_minutes:
            raise ValueError("sleep stages exceed totalSleepMinutes")
        return self
