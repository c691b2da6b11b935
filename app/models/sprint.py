from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import date, datetime, timezone

from app.schemas.status import SprintStatus


class Sprint(SQLModel, table=True):
    __tablename__ = "sprints"

    id: Optional[int] = Field(default=None, primary_key=True)
    nombre: str = Field(index=True, unique=True)
    objetivo: Optional[str] = None
    fecha_inicio: date
    fecha_fin: date
    estado: str = SprintStatus.PLANIFICADO.value   # a lo sumo uno 'activo'
    fecha_creacion: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
