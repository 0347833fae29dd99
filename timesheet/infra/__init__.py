"""Infrastructure layer - Settings, database and persistence"""

from .db import DatabaseEngine, get_engine, init_db
from .downloads import FileDownloadSink

__all__ = ["DatabaseEngine", "get_engine", "init_db", "FileDownloadSink"]
