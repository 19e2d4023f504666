"""FastAPI application entry point"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from studykit.api import budget, classes, dashboard, planner, questions, suggestions, users
from studykit.config import settings
from studykit.database import DocumentStore, create_store
from studykit.errors import ToolkitError
from studykit.utils.monitoring import StructuredLogger


def create_app(store: Optional[DocumentStore] = None) -> FastAPI:
    """Build the application; pass a store to skip connecting from settings"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the document store once for the process lifetime"""
        app.state.store = store if store is not None else create_store(settings)
        StructuredLogger.log_event(
            "store_opened",
            f"Document store ready: {type(app.state.store).__name__}",
            metadata={"db_name": settings.DB_NAME},
        )
        yield
        app.state.store.close()

    app = FastAPI(
        title="Student Life Toolkit API",
        description="Backend for classes, budget, quizzes, planner and study tips",
        version="1.0.0",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ToolkitError)
    async def toolkit_error_handler(request: Request, exc: ToolkitError):
        if exc.status_code >= 500:
            StructuredLogger.log_event(
                "request_failed",
                exc.message,
                metadata={"path": request.url.path, "error": type(exc).__name__},
                level="ERROR",
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "detail": f"{field}: {message}" if field else message,
                "error": "ValidationError",
            },
        )

    # Include routers
    app.include_router(users.router, prefix="/users", tags=["users"])
    app.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
    app.include_router(classes.router, prefix="/api/classes", tags=["classes"])
    app.include_router(suggestions.router, prefix="/ai", tags=["ai"])
    app.include_router(budget.router, prefix="/budget", tags=["budget"])
    app.include_router(questions.router, prefix="/questions", tags=["questions"])
    app.include_router(planner.router, prefix="/planner", tags=["planner"])

    @app.get("/api/health")
    async def health_check(request: Request):
        """Health check endpoint"""
        try:
            store_ok = await request.app.state.store.ping()
        except Exception as e:
            StructuredLogger.log_error(e, context={"function": "health_check"})
            store_ok = False
        return {
            "status": "healthy" if store_ok else "degraded",
            "service": "Student Life Toolkit API",
            "store": "ok" if store_ok else "unreachable",
        }

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        """Liveness text"""
        return "student-life-toolkit-server is running"

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("studykit.main:app", host="0.0.0.0", port=settings.PORT)
