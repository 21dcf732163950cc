from peewee import Database
from playhouse.db_url import connect


def open_database(database_url: str) -> Database:
    """
    Abre la base de datos indicada por la URL (SQLite o PostgreSQL).

    Quien la abre es responsable de cerrarla al apagar la aplicación.
    """
    return connect(database_url)
