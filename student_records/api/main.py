"""API router setup."""
from fastapi import APIRouter

from student_records.api.routes import students

api_router = APIRouter(prefix="/api")
api_router.include_router(students.router)
