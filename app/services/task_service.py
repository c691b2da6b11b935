import logging
from typing import Any, Dict

from app.core.exceptions import NotFound, ValidationFailed
from app.models.task import KanbanTask
from app.schemas.status import Priority, TaskCategory, TaskStatus
from app.schemas.task import TaskCreate, TaskUpdate
from app.services.record_store import RecordStore
from app.services.status_sync import sync_request_status_safely

logger = logging.getLogger(__name__)

# Campos que el formulario de edición puede cambiar, además de newStatus
EDITABLE_FIELDS = (
    "nombre_actividad",
    "descripcion",
    "responsable_ds",
    "prioridad",
    "fecha_limite",
    "categoria",
    "sprint_id",
    "solicitud_codigo",
)


def _check_choice(enum_cls, value, label: str):
    if value is not None and enum_cls.parse(value) is None:
        raise ValidationFailed(f"{label} inválido: {value}.", allowed=enum_cls.values())


def create_task(store: RecordStore, data: TaskCreate) -> KanbanTask:
    if not data.nombre_actividad:
        raise ValidationFailed("El nombre de la actividad es obligatorio.")
    _check_choice(Priority, data.prioridad, "Prioridad")
    _check_choice(TaskCategory, data.categoria, "Categoría")

    task = KanbanTask(
        solicitud_codigo=data.solicitud_codigo,
        nombre_actividad=data.nombre_actividad,
        descripcion=data.descripcion,
        responsable_ds=data.responsable_ds,
        prioridad=data.prioridad or Priority.MEDIA.value,
        fecha_limite=data.fecha_limite,
        categoria=data.categoria or TaskCategory.DESARROLLO.value,
        sprint_id=data.sprint_id,
        estado_actividad=TaskStatus.POR_HACER.value,
    )
    store.insert(task)
    return task


def build_task_changes(data: TaskUpdate) -> Dict[str, Any]:
    """Traduce el payload a columnas, respetando qué campos venían presentes."""
    present = data.model_fields_set
    changes: Dict[str, Any] = {}

    if "new_status" in present and data.new_status is not None:
        status = TaskStatus.parse(data.new_status)
        if status is None:
            raise ValidationFailed(
                f"Estado de actividad inválido: {data.new_status}.", allowed=TaskStatus.values()
            )
        changes["estado_actividad"] = status.value

    for field in EDITABLE_FIELDS:
        if field in present:
            changes[field] = getattr(data, field)

    if "nombre_actividad" in changes and not changes["nombre_actividad"]:
        raise ValidationFailed("El nombre de la actividad no puede quedar vacío.")
    if "prioridad" in changes:
        _check_choice(Priority, changes["prioridad"], "Prioridad")
        changes["prioridad"] = changes["prioridad"] or Priority.MEDIA.value
    if "categoria" in changes:
        _check_choice(TaskCategory, changes["categoria"], "Categoría")
        changes["categoria"] = changes["categoria"] or TaskCategory.DESARROLLO.value
    return changes


def update_task(store: RecordStore, data: TaskUpdate) -> KanbanTask:
    if data.task_id is None:
        raise ValidationFailed("taskId es obligatorio.")
    changes = build_task_changes(data)
    if not changes:
        raise ValidationFailed("No se proporcionaron campos válidos para actualizar.")

    task = store.get(KanbanTask, data.task_id)
    if not task:
        raise NotFound("Actividad no encontrada.")
    previous_code = task.solicitud_codigo

    store.update(KanbanTask, changes, KanbanTask.id == data.task_id)
    task = store.get(KanbanTask, data.task_id)

    if "estado_actividad" in changes:
        if task.solicitud_codigo:
            sync_request_status_safely(store, task.solicitud_codigo)
        # Si la actividad cambió de solicitud, la anterior pierde una actividad
        if previous_code and previous_code != task.solicitud_codigo:
            sync_request_status_safely(store, previous_code)
    return task


def delete_task(store: RecordStore, task_id: int) -> None:
    task = store.get(KanbanTask, task_id)
    if not task:
        raise NotFound("Actividad no encontrada.")
    code = task.solicitud_codigo

    store.delete(KanbanTask, KanbanTask.id == task_id)
    # La actividad ya no existe: se recalcula con el conjunto restante
    sync_request_status_safely(store, code)
