import os
from pathlib import Path
from sqlalchemy import create_engine

database_url = os.getenv("INKWELL_DB_URL") or "sqlite:///.data/inkwell.db"

if database_url.startswith("sqlite:///.data/"):
    # Ensure the .data directory exists
    Path(".data").mkdir(exist_ok=True)

engine_options = {"echo": False, "pool_pre_ping": True}
if not database_url.startswith("sqlite"):
    # Pool sizing only applies to server databases
    engine_options.update(pool_size=10, max_overflow=20, pool_recycle=3600)

engine = create_engine(database_url, **engine_options)

# Create all tables on import
from src.core.db.tables.base import Base
from src.core.db.tables.secretkey import SecretKey
from src.core.db.tables.recoverykey import RecoveryKey
from src.core.db.tables.post import Post
from src.core.db.tables.comment import Comment, CommentLike
from src.core.db.tables.moderation_log import ModerationLog

Base.metadata.create_all(engine)
