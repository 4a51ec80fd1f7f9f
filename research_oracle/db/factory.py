from research_oracle.config import get_settings
from research_oracle.db.interfaces.postgresql import PostgreSQLDatabase


def make_database() -> PostgreSQLDatabase:
    """
    Create and start the corpus database.

    Returns:
        PostgreSQLDatabase: Connected database wrapper
    """
    settings = get_settings()
    database = PostgreSQLDatabase(config=settings.postgres)
    database.startup()
    return database
