from dataclasses import dataclass

STUDENT_ROLE = "student"
PROFESSOR_ROLE = "professor"
ROLES = (STUDENT_ROLE, PROFESSOR_ROLE)


@dataclass(frozen=True)
class Identity:
    """An authenticated caller as resolved from a bearer token."""

    user_id: int
    role: str

    @property
    def is_student(self) -> bool:
        return self.role == STUDENT_ROLE

    @property
    def is_professor(self) -> bool:
        return self.role == PROFESSOR_ROLE
