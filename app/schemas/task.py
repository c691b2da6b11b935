# schemas/task.py

from pydantic import BaseModel, Field, field_validator
from typing import Optional, Any
from datetime import date, datetime


def blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


def coerce_sprint_id(value: Any) -> Optional[int]:
    """Acepta 3, "3" o " 3 "; cualquier otra cosa (vacío, "abc", 3.5) queda en None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value.strip())
    return None


class TaskCreate(BaseModel):
    solicitud_codigo: Optional[str] = None
    nombre_actividad: Optional[str] = None
    descripcion: Optional[str] = None
    responsable_ds: Optional[str] = None
    prioridad: Optional[str] = None
    fecha_limite: Optional[date] = None
    categoria: Optional[str] = None
    sprint_id: Optional[int] = None

    @field_validator("solicitud_codigo", "nombre_actividad", mode="before")
    @classmethod
    def strip_text(cls, value):
        if isinstance(value, str):
            value = value.strip()
        return blank_to_none(value)

    @field_validator("descripcion", "responsable_ds", "prioridad", "fecha_limite", "categoria", mode="before")
    @classmethod
    def blank_optional(cls, value):
        return blank_to_none(value)

    @field_validator("sprint_id", mode="before")
    @classmethod
    def normalize_sprint(cls, value):
        return coerce_sprint_id(value)


class TaskUpdate(TaskCreate):
    """Actualización dispersa: sólo cuentan los campos presentes en el payload.

    `model_fields_set` distingue "campo ausente" (no se toca) de "campo
    presente y vacío" (se guarda NULL).
    """

    task_id: Optional[int] = Field(default=None, alias="taskId")
    new_status: Optional[str] = Field(default=None, alias="newStatus")

    model_config = {"populate_by_name": True}

    @field_validator("new_status", mode="before")
    @classmethod
    def blank_status(cls, value):
        return blank_to_none(value)


class TaskRead(BaseModel):
    id: int
    solicitud_codigo: Optional[str]
    nombre_actividad: str
    descripcion: Optional[str]
    responsable_ds: Optional[str]
    prioridad: str
    fecha_limite: Optional[date]
    categoria: str
    sprint_id: Optional[int]
    estado_actividad: str
    fecha_creacion: datetime

    class Config:
        from_attributes = True


class TaskWithSprint(TaskRead):
    sprint_nombre: Optional[str] = None
