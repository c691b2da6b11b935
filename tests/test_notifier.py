import sys
import os
import asyncio
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

os.environ.setdefault("database_url", "sqlite:///:memory:")

from fastapi_mail import FastMail

from app.core.config import Settings
from app.services.notifier import Notifier, build_mail_config, split_recipients
from app.services.request_service import (
    build_approval_email,
    build_approval_links,
    parse_attachments,
)


def create_notifier():
    settings = Settings(mail_suppress_send=True, mail_use_credentials=False)
    mailer = FastMail(build_mail_config(settings))
    return Notifier(mailer), mailer


def test_send_records_html_message():
    notifier, mailer = create_notifier()

    async def run():
        with mailer.record_messages() as outbox:
            result = await notifier.send("jefe@example.com, ds@example.com", "[DS] Prueba", "<p>Hola</p>")
        return result, outbox

    result, outbox = asyncio.run(run())
    assert result.success is True
    assert result.error is None
    assert len(outbox) == 1
    assert outbox[0]["Subject"] == "[DS] Prueba"


def test_send_without_recipients_fails():
    notifier, _ = create_notifier()

    result = asyncio.run(notifier.send("", "asunto", "<p></p>"))
    assert result.success is False
    assert result.error == "Sin destinatarios."

    result = asyncio.run(notifier.send([" ", ""], "asunto", "<p></p>"))
    assert result.success is False


def test_send_with_invalid_address_reports_error():
    notifier, _ = create_notifier()

    result = asyncio.run(notifier.send("no-es-un-correo", "asunto", "<p></p>"))
    assert result.success is False
    assert result.error


def test_split_recipients():
    assert split_recipients("a@example.com, b@example.com,") == ["a@example.com", "b@example.com"]
    assert split_recipients(["a@example.com", " "]) == ["a@example.com"]
    assert split_recipients(None) == []


def test_parse_attachments():
    assert parse_attachments(None) == []
    assert parse_attachments("") == []
    assert parse_attachments("{roto") == []
    assert parse_attachments('{"url": "x"}') == []
    assert parse_attachments('[{"url": "x", "nombre": "a.pdf"}, "suelto"]') == [{"url": "x", "nombre": "a.pdf"}]
    assert parse_attachments([{"url": "y"}]) == [{"url": "y"}]


def test_approval_links_point_to_the_approve_route():
    links = build_approval_links("https://ds.example.com/", "/api", "REQ 1")
    assert links["approve"] == "https://ds.example.com/api/solicitudes/approve?code=REQ+1&action=approve"
    assert links["reject"].endswith("action=reject")


def test_approval_email_escapes_values_and_lists_files():
    body = build_approval_email(
        {
            "codigo_requerimiento": "REQ-1",
            "nombre_proyecto": "<script>alert(1)</script>",
            "prioridad": "Alta",
            "archivos_adjuntos": [{"url": "https://files.example.com/a.pdf", "nombre": "a&b.pdf"}],
        },
        "http://localhost:8000",
        "/api",
    )
    assert "<script>" not in body
    assert "&lt;script&gt;" in body
    assert "a&amp;b.pdf" in body
    assert "#dc3545" in body

    empty = build_approval_email({"codigo_requerimiento": "REQ-2"}, "http://localhost:8000", "/api")
    assert "No se adjuntaron archivos." in empty
