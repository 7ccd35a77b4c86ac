from pydantic import BaseModel


class MessageResponse(BaseModel):
    message: str


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


def paginate_meta(page: int, limit: int, total: int) -> dict:
    """Build the pagination block returned alongside list endpoints"""
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": (total + limit - 1) // limit if limit else 0,
    }
