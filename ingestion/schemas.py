from typing import Any

from pydantic import BaseModel, Field, field_validator


class GraphQLErrorEntry(BaseModel):
    message: str = "Unknown GraphQL error"

    model_config = {"extra": "allow"}


class LItemsData(BaseModel):
    litems: list[dict[str, Any]]


class GraphQLResponse(BaseModel):
    data: LItemsData | None = None
    errors: list[GraphQLErrorEntry] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    @field_validator("errors", mode="before")
    @classmethod
    def _null_errors_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value
