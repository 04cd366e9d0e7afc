import pytest
from pydantic import ValidationError as PydanticValidationError

from campus_booking.auth import jwt_handler
from campus_booking.auth.identity import Identity
from campus_booking.core import config
from campus_booking.core.errors import InvalidCredentials, UserAlreadyExists
from campus_booking.models.user import User
from campus_booking.routes.auth_routes import LoginRequest, RegisterRequest, login, me, register


@pytest.fixture(autouse=True)
def _fast_bcrypt(monkeypatch):
    monkeypatch.setattr(config, 'BCRYPT_ROUNDS', 4)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def _register(db, email: str = 'p1@test.edu', role: str = 'professor'):
    return register(
        RegisterRequest(name='Professor P1', email=email, password='password123', role=role),
        db=db,
    )


def test_register_request_normalizes_email_and_role() -> None:
    request = RegisterRequest(name='Student A1', email=' A1@Test.EDU ', password='password123', role=' Student ')

    assert request.email == 'a1@test.edu'
    assert request.role == 'student'


@pytest.mark.parametrize(
    'fields',
    [
        {'name': 'A1', 'email': 'a1@test.edu', 'password': 'password123', 'role': 'admin'},
        {'name': '  ', 'email': 'a1@test.edu', 'password': 'password123', 'role': 'student'},
        {'name': 'A1', 'email': ' ', 'password': 'password123', 'role': 'student'},
        {'name': 'A1', 'email': 'a1@test.edu', 'role': 'student'},
    ],
)
def test_register_request_rejects_invalid_fields(fields: dict) -> None:
    with pytest.raises(PydanticValidationError):
        RegisterRequest(**fields)


def test_register_issues_token_carrying_id_and_role(db) -> None:
    response = _register(db)

    user = db.query(User).filter(User.email == 'p1@test.edu').one()
    assert response.msg == 'User registered successfully'
    assert user.hashed_password != 'password123'
    assert jwt_handler.identity_from_token(response.token) == Identity(user_id=user.id, role='professor')


def test_register_rejects_existing_email(db) -> None:
    _register(db)

    with pytest.raises(UserAlreadyExists) as exception_info:
        _register(db, role='student')

    assert exception_info.value.status_code == 400


def test_login_returns_token_for_valid_credentials(db) -> None:
    _register(db)

    response = login(LoginRequest(email='P1@test.edu', password='password123'), db=db)

    assert response.msg == 'Login successful'
    assert jwt_handler.identity_from_token(response.token).role == 'professor'


@pytest.mark.parametrize(('email', 'password'), [('p1@test.edu', 'wrong'), ('nobody@test.edu', 'password123')])
def test_login_rejects_invalid_credentials(db, email: str, password: str) -> None:
    _register(db)

    with pytest.raises(InvalidCredentials):
        login(LoginRequest(email=email, password=password), db=db)


def test_me_echoes_identity() -> None:
    response = me(identity=Identity(user_id=9, role='student'))

    assert response.model_dump() == {'id': 9, 'role': 'student'}


@pytest.mark.parametrize('password', ['p' * 73, 'é' * 40])
def test_register_request_rejects_password_longer_than_bcrypt_accepts(password: str) -> None:
    with pytest.raises(PydanticValidationError):
        RegisterRequest(name='A1', email='a1@test.edu', password=password, role='student')


def test_register_accepts_password_at_byte_limit(db) -> None:
    response = register(
        RegisterRequest(name='Student A1', email='a1@test.edu', password='p' * 72, role='student'),
        db=db,
    )

    assert jwt_handler.identity_from_token(response.token).role == 'student'
    assert login(LoginRequest(email='a1@test.edu', password='p' * 72), db=db).msg == 'Login successful'
