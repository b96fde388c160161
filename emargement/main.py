import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from emargement.auth.jwt_handler import TokenService
from emargement.core.config import Settings, load_settings, validate_runtime_config
from emargement.database import build_engine, build_session_factory, ensure_schema
from emargement.routes import attendance_routes, auth_routes, session_routes

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    validate_runtime_config(settings)

    engine = build_engine(settings.database_url)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        try:
            ensure_schema(engine)
        except SQLAlchemyError:
            logger.exception('Database initialization failed. Check DATABASE_URL or DB_* settings.')
        yield
        engine.dispose()

    app = FastAPI(title='Emargement API', lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.token_service = TokenService.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    @app.middleware('http')
    async def log_requests(request: Request, call_next):
        try:
            response = await call_next(request)
        except Exception:
            logger.exception('%s %s failed', request.method, request.url.path)
            raise
        logger.info('%s %s -> %s', request.method, request.url.path, response.status_code)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={'error': jsonable_encoder(exc.errors())},
        )

    @app.get('/')
    def root():
        return {'status': 'Emargement API Running'}

    app.include_router(auth_routes.router, prefix='/auth')
    app.include_router(session_routes.router, prefix='/sessions')
    app.include_router(attendance_routes.router, prefix='/sessions')

    return app


app = create_app()
