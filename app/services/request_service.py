import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, List
from urllib.parse import urlencode

from app.core.config import Settings
from app.core.exceptions import NotFound, ValidationFailed
from app.models.request import DevelopmentRequest
from app.models.sprint import Sprint
from app.models.task import KanbanTask
from app.schemas.request import parse_attachments
from app.schemas.status import RequestStatus, TaskStatus
from app.services.notifier import Notifier, SendResult
from app.services.record_store import RecordStore
from app.services.status_sync import split_tasks
from app.utils.template_loader import load_template

logger = logging.getLogger(__name__)

# Columnas que no se pueden tocar desde update-field
READ_ONLY_FIELDS = {"codigo_requerimiento", "fecha_creacion"}


def build_approval_links(base_url: str, api_prefix: str, code: str) -> Dict[str, str]:
    root = base_url.rstrip("/") + api_prefix.rstrip("/") + "/solicitudes/approve"
    return {
        action: f"{root}?{urlencode({'code': code, 'action': action})}"
        for action in ("approve", "reject")
    }


def build_approval_email(solicitud: Dict[str, Any], base_url: str, api_prefix: str) -> str:
    code = solicitud.get("codigo_requerimiento", "")
    links = build_approval_links(base_url, api_prefix, code)

    files = parse_attachments(solicitud.get("archivos_adjuntos"))
    if files:
        files_list = "".join(
            load_template("attachment_item.html", url=f.get("url", ""), nombre=f.get("nombre", ""))
            for f in files
        )
    else:
        files_list = "<li>No se adjuntaron archivos.</li>"

    return load_template(
        "approval_email.html",
        safe=("files_list",),
        code=code,
        nombre_proyecto=solicitud.get("nombre_proyecto"),
        nombre_completo=solicitud.get("nombre_completo"),
        correo_electronico=solicitud.get("correo_electronico"),
        prioridad=solicitud.get("prioridad"),
        priority_color="#dc3545" if solicitud.get("prioridad") == "Alta" else "#ffc107",
        objetivo_justificacion=solicitud.get("objetivo_justificacion"),
        descripcion_requerimiento=solicitud.get("descripcion_requerimiento"),
        files_list=files_list,
        approve_link=links["approve"],
        reject_link=links["reject"],
    )


async def notify_request(
    notifier: Notifier,
    settings: Settings,
    solicitud: Dict[str, Any],
    recipients: List[str],
    base_url: str,
) -> SendResult:
    """Correo de aprobación al jefe; si sale bien, confirmación al solicitante.

    Sólo el primer envío decide el resultado.
    """
    code = solicitud.get("codigo_requerimiento", "")
    prefix = settings.mail_subject_prefix
    body = build_approval_email(solicitud, settings.public_base_url or base_url, settings.api_prefix)

    result = await notifier.send(recipients, f"{prefix} Aprobación Requerida: {code}", body)
    if not result.success:
        return result

    await notifier.send(
        solicitud.get("correo_electronico") or "",
        f"{prefix} Confirmación de Envío: {code}",
        load_template(
            "confirmation_email.html",
            code=code,
            correo_jefe_inmediato=solicitud.get("correo_jefe_inmediato"),
        ),
    )
    return result


def get_dashboard(store: RecordStore) -> Dict[str, List]:
    requests = store.select(DevelopmentRequest, order_by=(DevelopmentRequest.fecha_creacion.desc(),))
    tasks = store.select(KanbanTask, order_by=(KanbanTask.fecha_creacion, KanbanTask.id))
    sprints = store.select(Sprint, order_by=(Sprint.fecha_creacion.desc(), Sprint.id.desc()))

    sprint_names = {s.id: s.nombre for s in sprints}
    actividades = [
        {**task.model_dump(), "sprint_nombre": sprint_names.get(task.sprint_id)}
        for task in tasks
    ]
    return {"solicitudes": requests, "actividades": actividades, "sprints": sprints}


def update_request_field(store: RecordStore, code: str, campo: str, valor: Any) -> None:
    if campo in READ_ONLY_FIELDS or campo not in DevelopmentRequest.model_fields:
        raise ValidationFailed(f"El campo {campo} no se puede actualizar.")

    request = store.get(DevelopmentRequest, code)
    if not request:
        raise NotFound(f"No existe la solicitud {code}.")

    payload: Dict[str, Any] = {campo: valor, "fecha_actualizacion": datetime.now(timezone.utc)}
    if campo == "estado":
        status = RequestStatus.parse(valor)
        if status is None:
            raise ValidationFailed(f"Estado inválido: {valor}.", allowed=RequestStatus.values())
        payload[campo] = status.value
        if status is RequestStatus.EN_ANALISIS and request.fecha_inicio_analisis is None:
            payload["fecha_inicio_analisis"] = datetime.now(timezone.utc)

    store.update(DevelopmentRequest, payload, DevelopmentRequest.codigo_requerimiento == code)
    logger.info("Request %s field %s updated", code, campo)


def get_progress(store: RecordStore, code: str) -> Dict[str, Any]:
    tasks = store.select(KanbanTask, KanbanTask.solicitud_codigo == code)
    primary, support = split_tasks(tasks)
    by_status = Counter(t.estado_actividad for t in tasks)
    total = len(tasks)
    done = by_status.get(TaskStatus.TERMINADO.value, 0)

    return {
        "codigo": code,
        "total": total,
        "terminadas": done,
        "porcentaje": int(done * 100 / total + 0.5) if total else 0,
        "por_estado": {status: by_status.get(status, 0) for status in TaskStatus.values()},
        "principales": len(primary),
        "soporte": len(support),
    }
