import json

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from checkin.core.config import settings


def json_serializer(obj) -> str:
    # Sin escapar acentos: la búsqueda hace LIKE sobre el JSON guardado
    return json.dumps(obj, ensure_ascii=False)


engine = create_async_engine(settings.db_url, echo=False, json_serializer=json_serializer)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False)
