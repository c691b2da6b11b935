import sys
import os
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

os.environ.setdefault("database_url", "sqlite:///:memory:")

from datetime import date, timezone

from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session, create_engine
from sqlalchemy.pool import StaticPool

from app.main import app
from app.database import get_session
from app.models.request import DevelopmentRequest
from app.models.sprint import Sprint
from app.models.task import KanbanTask
import app.services.status_sync as status_sync


def create_test_client():
    app.dependency_overrides.clear()
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)

    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    return TestClient(app), engine


def seed_request(engine, code="REQ-1", estado="En Análisis"):
    with Session(engine) as session:
        session.add(
            DevelopmentRequest(
                codigo_requerimiento=code,
                nombre_proyecto="Portal",
                nombre_completo="Ana Pérez",
                correo_electronico="ana@example.com",
                correo_jefe_inmediato="jefe@example.com",
                estado=estado,
            )
        )
        session.commit()


def seed_task(engine, **fields):
    fields.setdefault("nombre_actividad", "Tarea")
    with Session(engine) as session:
        task = KanbanTask(**fields)
        session.add(task)
        session.commit()
        session.refresh(task)
        return task.id


def request_status(engine, code="REQ-1"):
    with Session(engine) as session:
        return session.get(DevelopmentRequest, code).estado


def test_create_task_with_only_a_name_uses_defaults():
    client, engine = create_test_client()

    resp = client.post("/api/actividades/add", json={"nombre_actividad": "X"})
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["nombre_actividad"] == "X"
    assert data["estado_actividad"] == "Por Hacer"
    assert data["categoria"] == "desarrollo"
    assert data["prioridad"] == "Media"
    for field in ("solicitud_codigo", "descripcion", "responsable_ds", "fecha_limite", "sprint_id"):
        assert data[field] is None

    app.dependency_overrides.clear()


def test_create_task_requires_name():
    client, engine = create_test_client()

    assert client.post("/api/actividades/add", json={"descripcion": "sin nombre"}).status_code == 400
    assert client.post("/api/actividades/add", json={"nombre_actividad": "   "}).status_code == 400

    app.dependency_overrides.clear()


def test_create_task_normalizes_blank_inputs_and_ignores_status():
    client, engine = create_test_client()

    resp = client.post(
        "/api/actividades/add",
        json={
            "nombre_actividad": "Diseño",
            "solicitud_codigo": "  REQ-1 ",
            "descripcion": "",
            "responsable_ds": " ",
            "fecha_limite": "",
            "prioridad": "",
            "sprint_id": "",
            "estado_actividad": "Terminado",
        },
    )
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["solicitud_codigo"] == "REQ-1"
    assert data["descripcion"] is None
    assert data["responsable_ds"] is None
    assert data["fecha_limite"] is None
    assert data["sprint_id"] is None
    assert data["prioridad"] == "Media"
    assert data["estado_actividad"] == "Por Hacer"

    app.dependency_overrides.clear()


def test_create_task_sprint_reference_normalization():
    client, engine = create_test_client()

    numeric = client.post("/api/actividades/add", json={"nombre_actividad": "a", "sprint_id": "7"})
    assert numeric.json()["data"]["sprint_id"] == 7

    number = client.post("/api/actividades/add", json={"nombre_actividad": "b", "sprint_id": 3})
    assert number.json()["data"]["sprint_id"] == 3

    garbage = client.post("/api/actividades/add", json={"nombre_actividad": "c", "sprint_id": "abc"})
    assert garbage.status_code == 201
    assert garbage.json()["data"]["sprint_id"] is None

    superscript = client.post("/api/actividades/add", json={"nombre_actividad": "d", "sprint_id": "²"})
    assert superscript.status_code == 201
    assert superscript.json()["data"]["sprint_id"] is None

    app.dependency_overrides.clear()


def test_create_task_rejects_unknown_category():
    client, engine = create_test_client()

    resp = client.post("/api/actividades/add", json={"nombre_actividad": "a", "categoria": "qa"})
    assert resp.status_code == 400

    app.dependency_overrides.clear()


def test_create_task_does_not_sync_request():
    client, engine = create_test_client()
    seed_request(engine, estado="Aprobada - Pendiente de Análisis")

    client.post("/api/actividades/add", json={"nombre_actividad": "a", "solicitud_codigo": "REQ-1"})
    assert request_status(engine) == "Aprobada - Pendiente de Análisis"

    app.dependency_overrides.clear()


def test_sparse_update_changes_only_priority():
    client, engine = create_test_client()
    task_id = seed_task(
        engine,
        nombre_actividad="Original",
        descripcion="desc",
        responsable_ds="Luis",
        fecha_limite=None,
        sprint_id=4,
    )

    resp = client.put("/api/actividades/update-status", json={"taskId": task_id, "prioridad": "Alta"})
    assert resp.status_code == 200

    with Session(engine) as session:
        task = session.get(KanbanTask, task_id)
        assert task.prioridad == "Alta"
        assert task.nombre_actividad == "Original"
        assert task.descripcion == "desc"
        assert task.responsable_ds == "Luis"
        assert task.fecha_limite is None
        assert task.sprint_id == 4
        assert task.estado_actividad == "Por Hacer"

    app.dependency_overrides.clear()


def test_update_present_empty_field_clears_it():
    client, engine = create_test_client()
    task_id = seed_task(engine, descripcion="desc", responsable_ds="Luis", sprint_id=2)

    resp = client.put(
        "/api/actividades/update-status",
        json={"taskId": task_id, "descripcion": "", "sprint_id": "", "fecha_limite": "2025-03-01"},
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["descripcion"] is None
    assert data["sprint_id"] is None
    assert data["fecha_limite"] == "2025-03-01"
    assert data["responsable_ds"] == "Luis"

    app.dependency_overrides.clear()


def test_update_validation_errors():
    client, engine = create_test_client()
    task_id = seed_task(engine)

    assert client.put("/api/actividades/update-status", json={"taskId": task_id}).status_code == 400
    assert client.put("/api/actividades/update-status", json={"prioridad": "Alta"}).status_code == 400
    assert client.put(
        "/api/actividades/update-status", json={"taskId": task_id, "newStatus": "Bloqueado"}
    ).status_code == 400
    assert client.put(
        "/api/actividades/update-status", json={"taskId": task_id, "nombre_actividad": ""}
    ).status_code == 400
    assert client.put(
        "/api/actividades/update-status", json={"taskId": 999, "prioridad": "Alta"}
    ).status_code == 404

    app.dependency_overrides.clear()


def test_status_update_rolls_up_to_request():
    client, engine = create_test_client()
    seed_request(engine)
    first = seed_task(engine, solicitud_codigo="REQ-1")
    second = seed_task(engine, solicitud_codigo="REQ-1")

    client.put("/api/actividades/update-status", json={"taskId": first, "newStatus": "En Curso"})
    assert request_status(engine) == "En Desarrollo"

    client.put("/api/actividades/update-status", json={"taskId": first, "newStatus": "Terminado"})
    client.put("/api/actividades/update-status", json={"taskId": second, "newStatus": "Terminado"})
    assert request_status(engine) == "Completado"

    support = seed_task(engine, solicitud_codigo="REQ-1", categoria="soporte")
    client.put("/api/actividades/update-status", json={"taskId": support, "newStatus": "En Curso"})
    assert request_status(engine) == "En Soporte"

    app.dependency_overrides.clear()


def test_non_status_update_does_not_sync():
    client, engine = create_test_client()
    seed_request(engine)
    task_id = seed_task(engine, solicitud_codigo="REQ-1", estado_actividad="En Curso")

    client.put("/api/actividades/update-status", json={"taskId": task_id, "prioridad": "Baja"})
    assert request_status(engine) == "En Análisis"

    app.dependency_overrides.clear()


def test_sync_failure_does_not_fail_the_update(monkeypatch):
    client, engine = create_test_client()
    seed_request(engine)
    task_id = seed_task(engine, solicitud_codigo="REQ-1")

    def boom(store, code):
        raise RuntimeError("sync down")

    monkeypatch.setattr(status_sync, "sync_request_status", boom)

    resp = client.put("/api/actividades/update-status", json={"taskId": task_id, "newStatus": "Terminado"})
    assert resp.status_code == 200
    assert resp.json()["data"]["estado_actividad"] == "Terminado"
    assert request_status(engine) == "En Análisis"

    app.dependency_overrides.clear()


def test_delete_task_resyncs_request():
    client, engine = create_test_client()
    seed_request(engine, estado="En Desarrollo")
    seed_task(engine, solicitud_codigo="REQ-1", estado_actividad="Terminado")
    open_task = seed_task(engine, solicitud_codigo="REQ-1", estado_actividad="En Curso")

    resp = client.delete(f"/api/actividades/{open_task}")
    assert resp.status_code == 200
    assert request_status(engine) == "Completado"

    with Session(engine) as session:
        assert session.get(KanbanTask, open_task) is None

    app.dependency_overrides.clear()


def test_deleting_last_task_keeps_request_status():
    client, engine = create_test_client()
    seed_request(engine, estado="En Desarrollo")
    only = seed_task(engine, solicitud_codigo="REQ-1", estado_actividad="En Curso")

    assert client.delete(f"/api/actividades/{only}").status_code == 200
    assert request_status(engine) == "En Desarrollo"

    app.dependency_overrides.clear()


def test_delete_missing_task_returns_404():
    client, engine = create_test_client()

    assert client.delete("/api/actividades/999").status_code == 404

    app.dependency_overrides.clear()


def test_relinking_task_resyncs_both_requests():
    client, engine = create_test_client()
    seed_request(engine, code="REQ-A", estado="En Desarrollo")
    seed_request(engine, code="REQ-B")
    seed_task(engine, solicitud_codigo="REQ-A", estado_actividad="Terminado")
    moved = seed_task(engine, solicitud_codigo="REQ-A", estado_actividad="En Curso")

    resp = client.put(
        "/api/actividades/update-status",
        json={"taskId": moved, "solicitud_codigo": "REQ-B", "newStatus": "Terminado"},
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["solicitud_codigo"] == "REQ-B"
    assert request_status(engine, "REQ-A") == "Completado"
    assert request_status(engine, "REQ-B") == "Completado"

    app.dependency_overrides.clear()


def test_new_rows_get_utc_creation_timestamps():
    assert KanbanTask(nombre_actividad="t").fecha_creacion.tzinfo is timezone.utc
    assert Sprint(nombre="S", fecha_inicio=date(2025, 1, 6), fecha_fin=date(2025, 1, 17)).fecha_creacion.tzinfo is timezone.utc
    request = DevelopmentRequest(
        codigo_requerimiento="REQ-1",
        nombre_proyecto="Portal",
        nombre_completo="Ana Pérez",
        correo_electronico="ana@example.com",
        correo_jefe_inmediato="jefe@example.com",
    )
    assert request.fecha_creacion.tzinfo is timezone.utc
