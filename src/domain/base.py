"""Base classes shared by domain entities"""

import uuid
from sqlmodel import SQLModel


def generate_uuid() -> str:
    """Generate a string UUID4 for entity primary keys"""
    return str(uuid.uuid4())


class BaseModel(SQLModel):
    """Common base for all persisted entities"""
    pass
