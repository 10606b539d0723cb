"""Pydantic schemas package."""
from src.schemas.auth import AuthResponse, LoginRequest
from src.schemas.course import CourseResponse, ReviewResponse
from src.schemas.user import UserResponse

__all__ = [
    "AuthResponse",
    "CourseResponse",
    "LoginRequest",
    "ReviewResponse",
    "UserResponse",
]
