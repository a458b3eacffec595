import os

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()

DATABASE_URL = os.getenv("SIGNBRIDGE_DATABASE_URL", "sqlite:///signbridge.db")

engine = create_engine(
    DATABASE_URL,
    echo=os.getenv("SIGNBRIDGE_DB_ECHO", "0") == "1",
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)

Session = sessionmaker(bind=engine)


def get_session():
    return Session()
