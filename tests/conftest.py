"""
Test fixtures for Synergie Mail.
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from synergie_mail.config import Config
from synergie_mail.models import STATUS_ERROR, STATUS_OK, SendResult
from synergie_mail.services.accounts import AccountRegistry
from synergie_mail.services.email_cache import EmailCache
from synergie_mail.services.email_parser import EmailParser
from synergie_mail.services.inbox import InboxService
from synergie_mail.services.templates import TemplateService

ACCOUNT_EMAIL = "recrutement@synergiemarketingroup.fr"


class FakeClock:
    """Horloge manuelle (secondes)."""

    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeMailService:
    """MailService sans réseau : messages prédéfinis, envois enregistrés."""

    def __init__(self, account, config=None):
        self.account = account
        self.messages: List = []
        self.fetch_error: Optional[Exception] = None
        self.send_error: Optional[str] = None
        self.connection_ok = True
        self.fetch_calls = 0
        self.sent: List[Dict] = []

    def fetch_messages(self, limit=None):
        self.fetch_calls += 1
        if self.fetch_error is not None:
            raise self.fetch_error
        return list(self.messages)[: limit or 50]

    def send_email(self, to, subject, html=None, text=None, cc=None, bcc=None):
        self.sent.append(
            {"to": to, "subject": subject, "html": html, "text": text, "cc": cc, "bcc": bcc}
        )
        if self.send_error:
            return SendResult(status=STATUS_ERROR, error=self.send_error)
        return SendResult(status=STATUS_OK, message_id="<abc@synergiemarketingroup.fr>")

    def test_connection(self):
        return self.connection_ok


def make_raw_email(
    subject: Optional[str] = "Bonjour",
    sender: Optional[str] = '"Jean Dupont" <jean@example.com>',
    to: Optional[str] = ACCOUNT_EMAIL,
    body: str = "Bonjour, ceci est un message de test assez long.",
    html: Optional[str] = None,
    date: Optional[str] = "Thu, 24 Jul 2025 19:05:00 +0200",
) -> bytes:
    """Construit un message RFC822 (texte, avec alternative HTML optionnelle)."""
    if html is None:
        msg = MIMEText(body, "plain", "utf-8")
    else:
        msg = MIMEMultipart("alternative")
        msg.attach(MIMEText(body, "plain", "utf-8"))
        msg.attach(MIMEText(html, "html", "utf-8"))

    if subject is not None:
        msg["Subject"] = subject
    if sender is not None:
        msg["From"] = sender
    if to is not None:
        msg["To"] = to
    if date is not None:
        msg["Date"] = date
    return msg.as_bytes()


def imap_entry(raw: bytes, flags=()) -> Dict:
    return {b"RFC822": raw, b"FLAGS": tuple(flags)}


@pytest.fixture
def env(monkeypatch):
    """Environnement minimal : seul le compte par défaut est configuré."""
    for var in (
        "COMMERCIAL_EMAIL_PASSWORD",
        "SUPPORT_EMAIL_PASSWORD",
        "DIRECTION_EMAIL_PASSWORD",
        "EMAIL_TEMPLATES_PATH",
        "LOG_PATH",
        "EMAIL_CACHE_DURATION",
        "IMAP_SERVER",
        "IMAP_PORT",
        "IMAP_FOLDER",
        "IMAP_TIMEOUT",
        "SMTP_SERVER",
        "SMTP_PORT",
        "SMTP_SECURE",
        "SMTP_TIMEOUT",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("HOSTINGER_EMAIL_PASSWORD", "test-password")
    return monkeypatch


@pytest.fixture
def config(env):
    return Config()


@pytest.fixture
def registry(config):
    return AccountRegistry(config, mail_service_factory=FakeMailService)


@pytest.fixture
def mail_service(registry):
    return registry.get_mail_service()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def inbox(registry, mail_service, clock):
    account = registry.get_default_account()
    parser = EmailParser(account_email=account.email, account_name=account.name)
    return InboxService(
        account=account,
        mail_service=mail_service,
        parser=parser,
        cache=EmailCache(duration=30.0, clock=clock),
    )


@pytest.fixture
def client(config, registry, inbox):
    """FastAPI test client sur des services sans réseau."""
    from synergie_mail.main import create_app

    context = {
        "config": config,
        "registry": registry,
        "inbox": inbox,
        "templates": TemplateService(),
    }
    app = create_app(context=context)
    return TestClient(app, raise_server_exceptions=False)
