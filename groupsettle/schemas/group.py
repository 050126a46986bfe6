from pydantic import BaseModel, Field


class Member(BaseModel):
    member_id: str = Field(min_length=1)
    display_name: str | None = None

    class Config:
        frozen = True
