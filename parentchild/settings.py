import os
from dataclasses import dataclass, field

DB_PATH_ENV = 'PARENTCHILD_DB_PATH'
DEFAULT_DB_PATH = 'data/parentchild.db'

@dataclass(frozen=True)
class Settings:
    """ Runtime configuration for the dashboard. Only the store location is read from the
        environment, everything else is fixed at construction.
    """

    db_path: str = field(default_factory=lambda: os.getenv(DB_PATH_ENV, DEFAULT_DB_PATH))
    enforce_integrity: bool = True
    echo: bool = False
