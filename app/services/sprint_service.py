import logging
from typing import Dict, List, Optional

from app.core.exceptions import Conflict, NotFound, ValidationFailed
from app.models.sprint import Sprint
from app.models.task import KanbanTask
from app.schemas.sprint import SprintCreate, SprintUpdate
from app.schemas.status import SprintStatus
from app.services.record_store import RecordStore

logger = logging.getLogger(__name__)


def _validate_dates(fecha_inicio, fecha_fin):
    if fecha_fin <= fecha_inicio:
        raise ValidationFailed("La fecha de fin debe ser posterior a la fecha de inicio.")


def _validate_status(value: str) -> SprintStatus:
    status = SprintStatus.parse(value)
    if status is None:
        raise ValidationFailed(
            f"Estado de sprint inválido: {value}.", allowed=SprintStatus.values()
        )
    return status


def _ensure_unique_name(store: RecordStore, nombre: str, exclude_id: Optional[int] = None):
    criteria = [Sprint.nombre == nombre]
    if exclude_id is not None:
        criteria.append(Sprint.id != exclude_id)
    if store.select_one(Sprint, *criteria):
        raise Conflict(f"Ya existe un sprint con el nombre '{nombre}'.")


def demote_active_sprints(store: RecordStore, exclude_id: Optional[int] = None) -> int:
    """Pasa a 'completado' todo sprint 'activo' salvo `exclude_id`."""
    criteria = [Sprint.estado == SprintStatus.ACTIVO.value]
    if exclude_id is not None:
        criteria.append(Sprint.id != exclude_id)
    demoted = store.update(Sprint, {"estado": SprintStatus.COMPLETADO.value}, *criteria)
    if demoted:
        logger.info("Demoted %d active sprint(s) to completado", demoted)
    return demoted


def get_sprint(store: RecordStore, sprint_id: int) -> Sprint:
    sprint = store.get(Sprint, sprint_id)
    if not sprint:
        raise NotFound("Sprint no encontrado.")
    return sprint


def get_active_sprint(store: RecordStore) -> Sprint:
    sprint = store.select_one(Sprint, Sprint.estado == SprintStatus.ACTIVO.value)
    if not sprint:
        raise NotFound("No hay ningún sprint activo.")
    return sprint


def list_sprints(store: RecordStore) -> List[Dict]:
    sprints = store.select(Sprint, order_by=(Sprint.fecha_creacion.desc(), Sprint.id.desc()))
    counts = store.count_by(KanbanTask, KanbanTask.sprint_id)
    return [
        {**sprint.model_dump(), "total_actividades": counts.get(sprint.id, 0)}
        for sprint in sprints
    ]


def create_sprint(store: RecordStore, data: SprintCreate) -> Sprint:
    nombre = (data.nombre or "").strip()
    if not nombre or data.fecha_inicio is None or data.fecha_fin is None:
        raise ValidationFailed("Nombre, fecha de inicio y fecha de fin son obligatorios.")
    _validate_dates(data.fecha_inicio, data.fecha_fin)
    status = _validate_status(data.estado or SprintStatus.PLANIFICADO.value)
    _ensure_unique_name(store, nombre)

    sprint = Sprint(
        nombre=nombre,
        objetivo=data.objetivo or None,
        fecha_inicio=data.fecha_inicio,
        fecha_fin=data.fecha_fin,
        estado=status.value,
    )
    with store.atomic():
        if status is SprintStatus.ACTIVO:
            demote_active_sprints(store)
        store.insert(sprint)
    return get_sprint(store, sprint.id)


def update_sprint(store: RecordStore, sprint_id: int, data: SprintUpdate) -> Sprint:
    sprint = get_sprint(store, sprint_id)
    changes = data.model_dump(exclude_unset=True)

    if "nombre" in changes:
        nombre = (changes["nombre"] or "").strip()
        if not nombre:
            raise ValidationFailed("El nombre del sprint no puede estar vacío.")
        _ensure_unique_name(store, nombre, exclude_id=sprint_id)
        changes["nombre"] = nombre

    if "objetivo" in changes:
        changes["objetivo"] = (changes["objetivo"] or "").strip() or None

    if "fecha_inicio" in changes or "fecha_fin" in changes:
        fecha_inicio = changes.get("fecha_inicio", sprint.fecha_inicio)
        fecha_fin = changes.get("fecha_fin", sprint.fecha_fin)
        if fecha_inicio is None or fecha_fin is None:
            raise ValidationFailed("Las fechas del sprint no pueden quedar vacías.")
        _validate_dates(fecha_inicio, fecha_fin)

    activating = False
    if "estado" in changes:
        status = _validate_status(changes["estado"])
        changes["estado"] = status.value
        activating = status is SprintStatus.ACTIVO and sprint.estado != SprintStatus.ACTIVO.value

    if not changes:
        return sprint

    with store.atomic():
        if activating:
            demote_active_sprints(store, exclude_id=sprint_id)
        store.update(Sprint, changes, Sprint.id == sprint_id)
    return get_sprint(store, sprint_id)


def delete_sprint(store: RecordStore, sprint_id: int) -> None:
    get_sprint(store, sprint_id)
    blocking = store.count(KanbanTask, KanbanTask.sprint_id == sprint_id)
    if blocking:
        raise Conflict(
            f"No se puede eliminar el sprint: tiene {blocking} actividad(es) asociada(s). "
            "Reasígnalas antes de eliminarlo.",
            total_actividades=blocking,
        )
    store.delete(Sprint, Sprint.id == sprint_id)
