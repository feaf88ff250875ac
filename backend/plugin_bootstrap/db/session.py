from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool

from plugin_bootstrap.core.config import settings


class Base(DeclarativeBase):
    pass


def make_engine(database_url: str | None = None):
    url = database_url or settings.database_url
    kwargs = {'future': True}
    if url.startswith('sqlite') and (url in ('sqlite://', 'sqlite:///:memory:')):
        # One shared connection, otherwise every session sees its own empty in-memory db.
        kwargs.update(connect_args={'check_same_thread': False}, poolclass=StaticPool)
    return create_engine(url, **kwargs)


def make_session_factory(database_url: str | None = None):
    # Importing the models registers their tables on Base.metadata.
    from plugin_bootstrap.models import setting  # noqa: F401
    engine = make_engine(database_url)
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
