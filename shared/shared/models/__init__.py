from shared.models.user import CurrentUser
from shared.models.pagination import PageMeta

__all__ = ["CurrentUser", "PageMeta"]
