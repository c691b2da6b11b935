from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import date, datetime, timezone

from app.schemas.status import TaskStatus, TaskCategory, Priority


class KanbanTask(SQLModel, table=True):
    __tablename__ = "actividades_ds"

    id: Optional[int] = Field(default=None, primary_key=True)
    solicitud_codigo: Optional[str] = Field(
        default=None, foreign_key="solicitudes_desarrollo.codigo_requerimiento", index=True
    )
    nombre_actividad: str
    descripcion: Optional[str] = None
    responsable_ds: Optional[str] = None
    prioridad: str = Priority.MEDIA.value
    fecha_limite: Optional[date] = None
    categoria: str = TaskCategory.DESARROLLO.value   # 'desarrollo', 'soporte', 'cambio'
    sprint_id: Optional[int] = Field(default=None, foreign_key="sprints.id", index=True)
    estado_actividad: str = TaskStatus.POR_HACER.value
    fecha_creacion: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
