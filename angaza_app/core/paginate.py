from pydantic import BaseModel

from .exceptions import ValidationFailed
from .settings import settings


class PaginatePage:
    def resolve(self, page: int | None, per_page: int | None) -> tuple[int, int]:
        page = 1 if page is None else page
        per_page = settings.DEFAULT_PAGE_SIZE if per_page is None else per_page
        if page < 1:
            raise ValidationFailed("page must be 1 or greater.")
        if per_page < 1 or per_page > settings.MAX_PAGE_SIZE:
            raise ValidationFailed(
                f"per_page must be between 1 and {settings.MAX_PAGE_SIZE}."
            )
        return page, per_page

    def offset(self, page: int, per_page: int) -> int:
        return (page - 1) * per_page

    def get_list_json_dumps(self, paginated_items):
        return [p.model_dump(mode="json") for p in paginated_items]

    def get_single_json_dumps(self, item: BaseModel):
        return item.model_dump(mode="json")

    def envelope(self, items: list, total: int, page: int, per_page: int) -> dict:
        return {
            "items": items,
            "total": total,
            "page": page,
            "per_page": per_page,
        }
