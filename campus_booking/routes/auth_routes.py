import logging

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from campus_booking.auth import jwt_handler, passwords
from campus_booking.auth.dependencies import get_current_identity
from campus_booking.auth.identity import ROLES, Identity
from campus_booking.core.errors import InternalFailure, InvalidCredentials, UserAlreadyExists
from campus_booking.models.user import User

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str
    role: str

    @field_validator('name', 'password')
    @classmethod
    def validate_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError('Please enter all fields.')
        return value

    @field_validator('password')
    @classmethod
    def validate_password_length(cls, value: str) -> str:
        if passwords.password_too_long(value):
            raise ValueError(f'Password must be {passwords.MAX_PASSWORD_BYTES} bytes or fewer.')
        return value

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized:
            raise ValueError('Please enter all fields.')
        return normalized

    @field_validator('role')
    @classmethod
    def validate_role(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in ROLES:
            raise ValueError('Role must be student or professor.')
        return normalized


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class TokenResponse(BaseModel):
    token: str
    msg: str


class IdentityResponse(BaseModel):
    id: int
    role: str


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


@router.post('/register', response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    try:
        if db.query(User.id).filter(User.email == data.email).first():
            raise UserAlreadyExists()

        user = User(
            name=data.name.strip(),
            email=data.email,
            hashed_password=passwords.hash_password(data.password),
            role=data.role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError as exc:
        db.rollback()
        raise UserAlreadyExists() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Registering %s failed.', data.email)
        raise InternalFailure() from exc

    logger.info('Registered %s %s.', user.role, user.id)
    token = jwt_handler.create_access_token(user_id=user.id, role=user.role)
    return TokenResponse(token=token, msg='User registered successfully')


@router.post('/login', response_model=TokenResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    try:
        user = db.query(User).filter(User.email == data.email).first()
    except SQLAlchemyError as exc:
        logger.exception('Looking up %s failed.', data.email)
        raise InternalFailure() from exc

    if user is None or not passwords.verify_password(data.password, user.hashed_password):
        raise InvalidCredentials()

    token = jwt_handler.create_access_token(user_id=user.id, role=user.role)
    return TokenResponse(token=token, msg='Login successful')


@router.get('/me', response_model=IdentityResponse)
def me(identity: Identity = Depends(get_current_identity)):
    return IdentityResponse(id=identity.user_id, role=identity.role)
