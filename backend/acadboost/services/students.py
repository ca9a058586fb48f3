"""
AcadBoost - Student Registration
Creates users and seeds new students with their initial test history.
"""
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from acadboost.core.exceptions import PerformanceEngineError, StudentExistsError
from acadboost.models.student import Student, UserRole
from acadboost.services.seeder import StudentSeeder

logger = logging.getLogger(__name__)


class StudentService:
    """Registration flow. Seeding failures never block registration."""

    def __init__(self, db: AsyncSession, seeder: Optional[StudentSeeder] = None):
        self.db = db
        self.seeder = seeder or StudentSeeder(db)

    async def get_by_email(self, email: str) -> Optional[Student]:
        result = await self.db.execute(select(Student).where(Student.email == email.lower()))
        return result.scalar_one_or_none()

    async def register(
        self,
        name: str,
        email: str,
        role: UserRole = UserRole.STUDENT,
    ) -> tuple[Student, bool]:
        """
        Create a user and, for students, seed their tests.

        Returns:
            (student, seeded)

        Raises:
            StudentExistsError: If the email is already registered
        """
        if await self.get_by_email(email):
            raise StudentExistsError(email)

        student = Student(
            name=name,
            email=email.lower(),
            role=UserRole(role).value,
            subjects={},
        )
        self.db.add(student)
        # Commit first so a failed seed cannot roll back the registration
        try:
            await self.db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent registration for the same email
            await self.db.rollback()
            raise StudentExistsError(email) from e
        await self.db.refresh(student)
        student_id = student.id

        if not student.is_student:
            return student, False

        try:
            await self.seeder.seed(student)
            await self.db.commit()
        except (PerformanceEngineError, SQLAlchemyError) as e:
            logger.error("Seeding failed for student %s: %s", student_id, e)
            await self.db.rollback()
            await self.db.refresh(student)
            return student, False

        await self.db.refresh(student)
        return student, True
