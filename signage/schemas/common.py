from typing import Any, ClassVar

from pydantic import BaseModel, model_validator
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class UpdateModel(APIModel):
    """Partial update body: omitted fields are left alone, and fields named in
    ``not_nullable`` may be omitted but not sent as null."""

    not_nullable: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def _reject_nulls(self):
        for name in self.not_nullable:
            if name in self.model_fields_set and getattr(self, name) is None:
                field = type(self).model_fields[name]
                raise ValueError(f"{field.alias or name} cannot be null")
        return self


class Pagination(APIModel):
    page: int
    limit: int
    total: int
    total_pages: int


def success(data: Any = None, message: str | None = None, **extra: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"status": "success"}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body


def paginated(items: list[Any], total: int, page: int, limit: int) -> dict[str, Any]:
    total_pages = (total + limit - 1) // limit if limit else 0
    return success(
        items,
        pagination=Pagination(page=page, limit=limit, total=total, total_pages=total_pages),
    )
