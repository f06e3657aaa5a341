# staffbook/core/db.py
from staffbook.core.config import settings

TORTOISE_ORM = {
    "connections": {
        "default": settings.DATABASE_URL,
    },
    "apps": {
        "models": {
            "models": ["staffbook.models.db"],
            "default_connection": "default",
        }
    },
    "use_tz": False,
    "timezone": "UTC",
}
