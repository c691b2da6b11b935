# schemas/status.py

import enum
from typing import Optional


class _ClosedEnum(str, enum.Enum):
    @classmethod
    def parse(cls, value) -> Optional["_ClosedEnum"]:
        """Devuelve el miembro para `value`, o None si no es un valor conocido."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None

    @classmethod
    def values(cls):
        return [member.value for member in cls]


class RequestStatus(_ClosedEnum):
    PENDIENTE_APROBACION = "Pendiente de Aprobación"
    APROBADA = "Aprobada - Pendiente de Análisis"
    RECHAZADA = "Rechazada"
    EN_ANALISIS = "En Análisis"
    EN_DESARROLLO = "En Desarrollo"
    EN_SOPORTE = "En Soporte"
    COMPLETADO = "Completado"


class TaskStatus(_ClosedEnum):
    POR_HACER = "Por Hacer"
    EN_CURSO = "En Curso"
    REVISION = "Revisión"
    TERMINADO = "Terminado"


class TaskCategory(_ClosedEnum):
    DESARROLLO = "desarrollo"
    SOPORTE = "soporte"
    CAMBIO = "cambio"


class Priority(_ClosedEnum):
    ALTA = "Alta"
    MEDIA = "Media"
    BAJA = "Baja"


class SprintStatus(_ClosedEnum):
    PLANIFICADO = "planificado"
    ACTIVO = "activo"
    COMPLETADO = "completado"


class ApprovalAction(_ClosedEnum):
    APPROVE = "approve"
    REJECT = "reject"


SUPPORT_CATEGORIES = frozenset({TaskCategory.SOPORTE, TaskCategory.CAMBIO})
ACTIVE_TASK_STATUSES = frozenset({TaskStatus.EN_CURSO, TaskStatus.REVISION})
