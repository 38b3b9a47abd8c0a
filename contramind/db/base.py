"""Import all models here for Alembic migrations."""
from contramind.db.base_class import Base  # noqa: F401
from contramind import models  # noqa: F401
