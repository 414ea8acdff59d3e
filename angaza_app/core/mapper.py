from typing import Iterable, Type, TypeVar

from pydantic import BaseModel

from .exceptions import ValidationFailed

T = TypeVar("T", bound=BaseModel)


class ORMMapper:
    @staticmethod
    def one(item, schema: Type[T]) -> T:
        return schema.model_validate(item)

    @staticmethod
    def many(items: Iterable, schema: Type[T]) -> list[T]:
        return [schema.model_validate(item) for item in items]

    @staticmethod
    def dump(item, schema: Type[T]) -> dict:
        return schema.model_validate(item).model_dump(mode="json")

    @staticmethod
    def apply(item, payload: dict, nullable: Iterable[str] = ()) -> dict:
        """Copy a partial-update payload onto an ORM object, returning what changed."""
        allowed_nulls = set(nullable)
        changed = {}
        for field, value in payload.items():
            if value is None and field not in allowed_nulls:
                raise ValidationFailed(f"{field} cannot be null.")
            if getattr(item, field) != value:
                changed[field] = (getattr(item, field), value)
                setattr(item, field, value)
        return changed
