# schemas/sprint.py

from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime

class SprintCreate(BaseModel):
    nombre: Optional[str] = None
    objetivo: Optional[str] = None
    fecha_inicio: Optional[date] = None
    fecha_fin: Optional[date] = None
    estado: Optional[str] = "planificado"

class SprintUpdate(BaseModel):
    nombre: Optional[str] = None
    objetivo: Optional[str] = None
    fecha_inicio: Optional[date] = None
    fecha_fin: Optional[date] = None
    estado: Optional[str] = None

class SprintRead(BaseModel):
    id: int
    nombre: str
    objetivo: Optional[str]
    fecha_inicio: date
    fecha_fin: date
    estado: str
    fecha_creacion: datetime

    class Config:
        from_attributes = True

class SprintWithCount(SprintRead):
    total_actividades: int = 0
