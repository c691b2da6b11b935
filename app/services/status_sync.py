"""Roll-up of task statuses into the status of their parent request.

Tasks are split into primary work (desarrollo, or any unknown category) and
support work (soporte / cambio). The request is only "Completado" once every
primary task is done and no support work is pending; while support work is
open it stays "En Soporte"; any open primary task means "En Desarrollo".
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from app.models.request import DevelopmentRequest
from app.models.task import KanbanTask
from app.schemas.status import (
    ACTIVE_TASK_STATUSES,
    SUPPORT_CATEGORIES,
    RequestStatus,
    TaskCategory,
    TaskStatus,
)
from app.services.record_store import RecordStore

logger = logging.getLogger(__name__)


def is_support_task(task: KanbanTask) -> bool:
    return TaskCategory.parse(task.categoria) in SUPPORT_CATEGORIES


def split_tasks(tasks: Iterable[KanbanTask]):
    primary: List[KanbanTask] = []
    support: List[KanbanTask] = []
    for task in tasks:
        (support if is_support_task(task) else primary).append(task)
    return primary, support


def derive_request_status(tasks: Iterable[KanbanTask]) -> Optional[RequestStatus]:
    """Estado de la solicitud según sus actividades, o None si no hay que tocarlo."""
    primary, support = split_tasks(tasks)
    primary_states = [TaskStatus.parse(t.estado_actividad) for t in primary]
    support_states = [TaskStatus.parse(t.estado_actividad) for t in support]

    if primary_states and all(s is TaskStatus.TERMINADO for s in primary_states):
        if not support_states:
            return RequestStatus.COMPLETADO
        if any(s in ACTIVE_TASK_STATUSES for s in support_states):
            return RequestStatus.EN_SOPORTE
        if all(s is TaskStatus.TERMINADO for s in support_states):
            return RequestStatus.COMPLETADO
        return RequestStatus.EN_SOPORTE

    if any(s is not None and s is not TaskStatus.TERMINADO for s in primary_states):
        return RequestStatus.EN_DESARROLLO

    return None


def sync_request_status(store: RecordStore, code: str) -> Optional[RequestStatus]:
    """Recalcula y persiste el estado de la solicitud `code`.

    Sólo escribe si el estado derivado difiere del almacenado; devuelve el
    estado escrito o None si no hubo escritura.
    """
    tasks = store.select(KanbanTask, KanbanTask.solicitud_codigo == code)
    derived = derive_request_status(tasks)
    if derived is None:
        return None

    request = store.get(DevelopmentRequest, code)
    if request is None:
        logger.warning("Sync skipped: request %s not found", code)
        return None
    previous = request.estado
    if previous == derived.value:
        return None

    store.update(
        DevelopmentRequest,
        {"estado": derived.value, "fecha_actualizacion": datetime.now(timezone.utc)},
        DevelopmentRequest.codigo_requerimiento == code,
    )
    logger.info("Request %s status %r -> %r", code, previous, derived.value)
    return derived


def sync_request_status_safely(store: RecordStore, code: Optional[str]) -> Optional[RequestStatus]:
    # La mutación de la actividad ya está confirmada: un fallo aquí no debe llegar al cliente.
    if not code:
        return None
    try:
        return sync_request_status(store, code)
    except Exception:
        logger.exception("Status sync failed for request %s", code)
        return None
