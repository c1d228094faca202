# wavy/db/init.py

from wavy.config import settings
from wavy.db.base import Base
from wavy.db.session import engine
from wavy import models  # noqa: F401


def ensure_upload_directories() -> None:
    settings.cv_upload_dir.mkdir(parents=True, exist_ok=True)


def init_database() -> None:
    ensure_upload_directories()
    Base.metadata.create_all(bind=engine)
