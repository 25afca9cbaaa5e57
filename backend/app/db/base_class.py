from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SmartBill ORM models."""
    pass
