from typing import Any

from pymongo import MongoClient
from pymongo.database import Database


def open_client(mongo_uri: str, timeout_ms: int = 3000) -> MongoClient[Any]:
    """
    Crea el cliente de MongoDB.

    `tz_aware=True` hace que las fechas vuelvan con zona UTC. El contenedor
    cierra el cliente al apagar la aplicación.
    """
    return MongoClient(mongo_uri, tz_aware=True, serverSelectionTimeoutMS=timeout_ms)


def get_db(client: MongoClient[Any], db_name: str) -> Database[Any]:
    return client[db_name]
