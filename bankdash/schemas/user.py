"""
Pydantic schemas for user responses.

UserResponse is the serialized user document returned by sign-in,
sign-up and the logged-in-user lookup. It never includes the password
hash or the SSN.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr


class UserResponse(BaseModel):
    """Public representation of a signed-up user."""
    id: uuid.UUID                  # UserProfile document ID
    user_id: uuid.UUID             # User account ID
    email: EmailStr
    name: str
    first_name: str
    last_name: str
    address1: str
    city: str
    state: str
    postal_code: str
    date_of_birth: str
    dwolla_customer_id: str
    dwolla_customer_url: str
    created_at: datetime
