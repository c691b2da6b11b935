# api/endpoints/solicitudes.py

from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse

from app.core.config import Settings
from app.core.exceptions import WorkflowError
from app.database import get_store
from app.schemas.request import (
    DashboardRead,
    FieldUpdate,
    NotificationPayload,
    OperationResult,
    ProgressRead,
)
from app.services import approval, request_service
from app.services.notifier import Notifier, get_notifier
from app.services.record_store import RecordStore

router = APIRouter()
settings = Settings()

@router.post("/notificar", response_model=OperationResult)
async def notify_request(
    payload: NotificationPayload,
    request: Request,
    notifier: Notifier = Depends(get_notifier),
):
    result = await request_service.notify_request(
        notifier, settings, payload.solicitud, payload.destinatarios, str(request.base_url)
    )
    if not result.success:
        # La notificación al jefe es imprescindible para el flujo
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "Fallo al enviar el correo de notificación al jefe.",
                "error": result.error,
            },
        )
    return OperationResult(message="Solicitud notificada correctamente y correos enviados.")

@router.get("/approve", response_class=HTMLResponse)
def approve_request(
    code: Optional[str] = None,
    action: Optional[str] = None,
    store: RecordStore = Depends(get_store),
):
    """Destino del enlace del correo: responde HTML porque lo abre una persona."""
    try:
        code, parsed = approval.parse_approval(code, action)
    except WorkflowError as exc:
        return HTMLResponse(
            approval.render_approval_error("Error de Parámetros", exc.message),
            status_code=exc.status_code,
        )

    try:
        approval.apply_approval(store, code, parsed)
    except WorkflowError as exc:
        detail = exc.extra.get("error") or exc.message
        if exc.status_code >= 500:
            title = "Error interno del servidor"
            detail = f"No se pudo procesar la acción. Por favor, contacta a TI. Error: {detail}"
        else:
            title = "Solicitud no encontrada"
        return HTMLResponse(approval.render_approval_error(title, detail), status_code=exc.status_code)

    return HTMLResponse(approval.render_approval_result(code, parsed))

@router.get("/dashboard", response_model=DashboardRead)
def get_dashboard(store: RecordStore = Depends(get_store)):
    return request_service.get_dashboard(store)

@router.put("/update-field", response_model=OperationResult)
def update_field(field_in: FieldUpdate, store: RecordStore = Depends(get_store)):
    request_service.update_request_field(
        store, field_in.codigo_requerimiento, field_in.campo, field_in.valor
    )
    return OperationResult(message=f"{field_in.campo} actualizado correctamente.")

@router.get("/{code}/progress", response_model=ProgressRead)
def get_progress(code: str, store: RecordStore = Depends(get_store)):
    return request_service.get_progress(store, code)
