"""
Pydantic schemas for the sign-in / sign-up endpoints.

SignUpRequest carries everything Dwolla needs to create a personal
customer in addition to the login credentials. Pydantic validates the
shape before any vendor is called, so a malformed form never reaches
Dwolla.
"""

from pydantic import BaseModel, EmailStr, Field


class SignUpRequest(BaseModel):
    """Request body for POST /auth/sign-up."""
    email: EmailStr
    password: str = Field(min_length=8)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    address1: str = Field(min_length=1, max_length=50)
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(pattern=r"^[A-Z]{2}$")                   # e.g. "NY"
    postal_code: str = Field(pattern=r"^\d{5}(-\d{4})?$")
    date_of_birth: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")  # YYYY-MM-DD
    ssn: str = Field(pattern=r"^\d{4}(\d{5})?$")                 # last 4 or full 9


class SignInRequest(BaseModel):
    """Request body for POST /auth/sign-in."""
    email: EmailStr
    password: str
