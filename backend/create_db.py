from securevault.core.config import settings
from securevault.db.base import Base
from securevault.db.session import make_engine

import securevault.db.models  # noqa: F401  registers all tables


print("Creating database tables...")
Base.metadata.create_all(bind=make_engine(settings.DATABASE_URL))
print("Done.")
