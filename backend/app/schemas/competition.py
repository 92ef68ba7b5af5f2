"""Competition schemas."""

import datetime as dt

from pydantic import Field, model_validator

from app.schemas.base import CamelModel


class CompetitionCreate(CamelModel):
    name: str = Field(min_length=3, max_length=100)
    description: str = Field("", max_length=1000)
    start_date: dt.date
    end_date: dt.date
    is_public: bool = False

    @model_validator(mode="after")
    def end_not_before_start(self) -> "CompetitionCreate":
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self
