from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from app.api.endpoints import solicitudes
from app.api.endpoints import actividades
from app.api.endpoints import sprints


from fastapi.middleware.cors import CORSMiddleware
from app.core.config import Settings
from app.core.exceptions import WorkflowError
from app.core.logging_config import setup_logging

settings = Settings()
setup_logging(settings.log_level)
app = FastAPI(title="Gestión de Solicitudes DS")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(WorkflowError)
async def workflow_error_handler(request: Request, exc: WorkflowError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

app.include_router(solicitudes.router, prefix=f"{settings.api_prefix}/solicitudes", tags=["solicitudes"])
app.include_router(actividades.router, prefix=f"{settings.api_prefix}/actividades", tags=["actividades"])
app.include_router(sprints.router, prefix=f"{settings.api_prefix}/sprints", tags=["sprints"])
