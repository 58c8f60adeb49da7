import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from classpoints.api.v1.admin.router import router as admin_router
from classpoints.api.v1.auth.router import router as auth_router
from classpoints.api.v1.classes.router import router as classes_router
from classpoints.api.v1.groups.router import router as groups_router
from classpoints.api.v1.students.router import router as students_router
from classpoints.core.config import settings

# Setup logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


def create_app() -> FastAPI:
    app = FastAPI(title="Class Points")

    # CORS: allow the browser frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(auth_router)
    app.include_router(admin_router)
    app.include_router(classes_router)
    app.include_router(students_router)
    app.include_router(groups_router)

    return app


app = create_app()
