from beanie import Document, Indexed
from pydantic import Field, EmailStr
from typing import Annotated, Optional
from enum import Enum
from datetime import datetime
from uuid import UUID, uuid4


class UserRole(str, Enum):
    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    STAFF = "staff"


MANAGER_ROLES = (UserRole.SUPERADMIN, UserRole.ADMIN)


class User(Document):
    """
    Staff account. Owned by the identity provider; this service only reads it
    to attach the posting staff member to a sale.
    """
    user_id: UUID = Field(default_factory=uuid4)
    email: Annotated[EmailStr, Indexed(unique=True)]
    username: str
    first_name: str = ""
    last_name: str = ""
    role: UserRole = UserRole.STAFF
    is_active: bool = True

    created_at: datetime = Field(default_factory=datetime.utcnow)
    last_login: Optional[datetime] = None

    class Settings:
        name = "users"
