import logging

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from acadpilot.auth.dependencies import get_optional_user
from acadpilot.auth.schemas import PublicUser
from acadpilot.core import config
from acadpilot.core.errors import AccountError, InternalError
from acadpilot.database import Base, engine, ensure_account_schema
from acadpilot.models import session, user, verification_code  # noqa: F401
from acadpilot.routes import auth_routes, page_routes

logging.basicConfig(level=config.LOG_LEVEL, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

logger = logging.getLogger(__name__)

config.validate_runtime_config()

app = FastAPI(title='Acad Co-Pilot')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={'success': False, 'error': message})


@app.exception_handler(AccountError)
async def account_error_handler(_: Request, exc: AccountError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(400, 'Invalid request body.')


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(_: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception('Database error while handling request')
    return error_response(InternalError.status_code, InternalError.default_message)


@app.exception_handler(Exception)
async def unexpected_error_handler(_: Request, exc: Exception) -> JSONResponse:
    logger.exception('Unexpected error while handling request')
    return error_response(InternalError.status_code, InternalError.default_message)


@app.on_event('startup')
def initialize_database() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        ensure_account_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL.')


@app.get('/')
def root(current_user: PublicUser | None = Depends(get_optional_user)):
    return {'status': 'Acad Co-Pilot API Running', 'authenticated': current_user is not None}


app.include_router(auth_routes.router, prefix='/api/auth')
app.include_router(page_routes.router)
