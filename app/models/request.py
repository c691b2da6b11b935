from typing import Optional, List, Dict, Any
from sqlmodel import SQLModel, Field, Column
from sqlalchemy import JSON
from datetime import datetime, timezone

from app.schemas.status import RequestStatus


class DevelopmentRequest(SQLModel, table=True):
    """Solicitud de desarrollo. La crea el formulario de intake, fuera de este servicio."""

    __tablename__ = "solicitudes_desarrollo"

    codigo_requerimiento: str = Field(primary_key=True)
    nombre_proyecto: str
    nombre_completo: str
    correo_electronico: str
    correo_jefe_inmediato: str
    prioridad: str = "Media"                # 'Alta', 'Media', 'Baja'
    objetivo_justificacion: Optional[str] = None
    descripcion_requerimiento: Optional[str] = None
    archivos_adjuntos: Optional[List[Dict[str, Any]]] = Field(default_factory=list, sa_column=Column(JSON))
    estado: str = RequestStatus.PENDIENTE_APROBACION.value
    fecha_creacion: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    fecha_inicio_analisis: Optional[datetime] = None   # sólo la primera vez que pasa a "En Análisis"
    fecha_actualizacion: Optional[datetime] = None
    responsable_asignado: Optional[str] = None
    prioridad_asignada: Optional[str] = None
    observaciones_ds: Optional[str] = None
