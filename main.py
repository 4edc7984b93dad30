from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from teamcomm.bootstrap import init_database
from teamcomm.core.config import Settings, load_settings
from teamcomm.core.exceptions import AuthenticationError, TeamCommError
from teamcomm.core.logging_config import logger
from teamcomm.database import get_db
from teamcomm.routers import announcement, auth, deployment, meta, target_date, user, workspace
from teamcomm.services.auth import AuthService


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """
    Build the API application.

    The database is connected and its schema reconciled in the lifespan
    hook, so no request reaches a data route before reconciliation ran.

    Args:
        settings: Preloaded settings; read from the config file when omitted
        engine: Existing engine (tests); created from settings when omitted
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app_settings = settings or load_settings()
        logger.setLevel(app_settings.LOG_LEVEL.upper())
        app_engine, session_factory, report = init_database(app_settings, engine=engine)
        app.state.settings = app_settings
        app.state.engine = app_engine
        app.state.session_factory = session_factory
        app.state.reconciliation = report
        app.state.auth_service = AuthService(
            session_duration=timedelta(hours=app_settings.application.session_duration_hours)
        )
        logger.info("Team communication API ready")
        yield
        if engine is None:
            app_engine.dispose()

    app = FastAPI(
        title="OpenTeam Communication API",
        version="1.0.0",
        redirect_slashes=False,  # Disable automatic redirects to prevent POST data loss
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=(settings or Settings()).CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TeamCommError)
    async def teamcomm_error_handler(request: Request, exc: TeamCommError):
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    # Include routers
    app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(announcement.router, prefix="/api/announcements", tags=["Announcements"])
    app.include_router(target_date.router, prefix="/api/target-dates", tags=["Target Dates"])
    app.include_router(deployment.router, prefix="/api/deployments", tags=["Deployments"])
    app.include_router(workspace.router, prefix="/api/workspaces", tags=["Workspaces"])
    app.include_router(user.router, prefix="/api/users", tags=["Users"])
    app.include_router(meta.router, prefix="/api", tags=["Metadata"])

    @app.get("/health")
    def health_check(request: Request, db: Session = Depends(get_db)):
        try:
            db.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error(f"Health check failed: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Service unhealthy"
            )
        report = request.app.state.reconciliation
        return {
            "status": "healthy",
            "database": "connected",
            "schema_steps_failed": report.failed,
        }

    return app


app = create_app()
