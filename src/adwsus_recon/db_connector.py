from sqlalchemy import create_engine
from sqlalchemy.engine import URL


def wsus_database_url(config):
    """URL of the WSUS database; ``wsus_db_url`` wins over the derived one."""
    if config.wsus_db_url:
        return config.wsus_db_url
    return URL.create(
        "mssql+pyodbc",
        host=config.wsus_server,
        database="SUSDB",
        query={
            "driver": "ODBC Driver 18 for SQL Server",
            "trusted_connection": "yes",
            "Encrypt": "yes" if config.wsus_use_ssl else "no",
        },
    )


def get_db_connection(config):
    return create_engine(wsus_database_url(config))
