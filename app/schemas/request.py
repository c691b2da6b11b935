# schemas/request.py

import json
import logging

from pydantic import BaseModel, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime

from app.schemas.sprint import SprintRead
from app.schemas.task import TaskWithSprint

logger = logging.getLogger(__name__)


def parse_attachments(raw: Any) -> List[Dict[str, Any]]:
    """archivos_adjuntos llega como lista o como JSON en texto; si no se entiende, lista vacía."""
    if raw is None or raw == "":
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("archivos_adjuntos is not valid JSON: %r", raw[:200])
            return []
    if not isinstance(raw, list):
        return []
    return [item for item in raw if isinstance(item, dict)]


class RequestRead(BaseModel):
    codigo_requerimiento: str
    nombre_proyecto: str
    nombre_completo: str
    correo_electronico: str
    correo_jefe_inmediato: str
    prioridad: str
    objetivo_justificacion: Optional[str]
    descripcion_requerimiento: Optional[str]
    archivos_adjuntos: Optional[List[Dict[str, Any]]] = None
    estado: str
    fecha_creacion: datetime
    fecha_inicio_analisis: Optional[datetime]
    fecha_actualizacion: Optional[datetime]
    responsable_asignado: Optional[str]
    prioridad_asignada: Optional[str]
    observaciones_ds: Optional[str]

    class Config:
        from_attributes = True

    @field_validator("archivos_adjuntos", mode="before")
    @classmethod
    def normalize_attachments(cls, value):
        return parse_attachments(value)


class NotificationPayload(BaseModel):
    # Datos tal como los envía el formulario tras insertar la solicitud
    solicitud: Dict[str, Any]
    destinatarios: List[str]


class FieldUpdate(BaseModel):
    codigo_requerimiento: str
    campo: str
    valor: Any = None


class DashboardRead(BaseModel):
    solicitudes: List[RequestRead]
    actividades: List[TaskWithSprint]
    sprints: List[SprintRead]


class ProgressRead(BaseModel):
    codigo: str
    total: int
    terminadas: int
    porcentaje: int
    por_estado: Dict[str, int]
    principales: int
    soporte: int


class OperationResult(BaseModel):
    success: bool = True
    message: str
