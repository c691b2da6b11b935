import logging
from datetime import datetime, timezone
from typing import Optional

from app.core.exceptions import NotFound, ValidationFailed
from app.models.request import DevelopmentRequest
from app.schemas.status import ApprovalAction, RequestStatus
from app.services.record_store import RecordStore
from app.utils.template_loader import load_template

logger = logging.getLogger(__name__)

TARGET_STATUS = {
    ApprovalAction.APPROVE: RequestStatus.APROBADA,
    ApprovalAction.REJECT: RequestStatus.RECHAZADA,
}
VERB = {ApprovalAction.APPROVE: "APROBADA", ApprovalAction.REJECT: "RECHAZADA"}
COLOR = {ApprovalAction.APPROVE: "green", ApprovalAction.REJECT: "red"}


def parse_approval(code: Optional[str], action: Optional[str]):
    code = (code or "").strip()
    parsed = ApprovalAction.parse(action)
    if not code or parsed is None:
        raise ValidationFailed("Enlace de aprobación inválido.")
    return code, parsed


def apply_approval(store: RecordStore, code: str, action: ApprovalAction) -> RequestStatus:
    """Sobrescribe el estado sin mirar el anterior: un segundo clic re-aplica el mismo."""
    target = TARGET_STATUS[action]
    affected = store.update(
        DevelopmentRequest,
        {"estado": target.value, "fecha_actualizacion": datetime.now(timezone.utc)},
        DevelopmentRequest.codigo_requerimiento == code,
    )
    if not affected:
        raise NotFound(f"No existe la solicitud {code}.")
    logger.info("Request %s set to %r via approval link", code, target.value)
    return target


def render_approval_result(code: str, action: ApprovalAction) -> str:
    return load_template(
        "approval_result.html",
        code=code,
        verb=VERB[action],
        color=COLOR[action],
        estado=TARGET_STATUS[action].value,
    )


def render_approval_error(title: str, message: str) -> str:
    return load_template("approval_error.html", title=title, message=message)
