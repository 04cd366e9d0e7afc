import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from campus_booking.booking.engine import BookingEngine
from campus_booking.core import config
from campus_booking.core.errors import BookingError, InternalFailure, ValidationError
from campus_booking.database import create_db_engine, create_session_factory, init_schema
from campus_booking.routes import auth_routes, booking_routes

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={'error': exc.code, 'detail': exc.detail},
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ValidationError()
    return JSONResponse(
        status_code=error.status_code,
        content={'error': error.code, 'detail': error.detail, 'errors': jsonable_encoder(exc.errors())},
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception('Unhandled error on %s %s', request.method, request.url.path)
    error = InternalFailure()
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={'error': error.code, 'detail': error.detail},
    )


def create_app(database_url: str | None = None) -> FastAPI:
    config.validate_runtime_config()
    configure_logging()

    app = FastAPI(title='Campus Booking API')

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    db_engine = create_db_engine(database_url or config.DATABASE_URL)
    session_factory = create_session_factory(db_engine)
    app.state.db_engine = db_engine
    app.state.session_factory = session_factory
    app.state.booking_engine = BookingEngine(session_factory)

    app.add_exception_handler(BookingError, booking_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    @app.on_event('startup')
    def initialize_database() -> None:
        try:
            init_schema(db_engine)
        except SQLAlchemyError:
            logger.exception('Database initialization failed. Check DATABASE_URL.')

    @app.get('/')
    def root():
        return {'status': 'Campus Booking API Running'}

    app.include_router(auth_routes.router, prefix='/api/auth')
    app.include_router(booking_routes.router, prefix='/api')

    return app


app = create_app()
