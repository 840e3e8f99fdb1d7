from __future__ import annotations

import os

from services.storefront.app.db.database import get_engine
from services.storefront.app.db.models import Base


def init_db() -> None:
    if os.getenv("STOREFRONT_DB_AUTO_CREATE", "true").strip().lower() not in {
        "1",
        "true",
        "yes",
        "y",
    }:
        return

    engine = get_engine()
    if engine.url.get_backend_name() == "sqlite" and engine.url.database:
        # The default URL points into .local/, which may not exist yet.
        db_dir = os.path.dirname(engine.url.database)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    Base.metadata.create_all(bind=engine)
