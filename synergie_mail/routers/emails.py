"""
Email endpoints: inbox listing, stats, read/update, send, refresh.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from synergie_mail.models import STATUS_DEGRADED, STATUS_OK
from synergie_mail.schemas import (
    ConnectionTestResponse,
    RefreshResponse,
    SendEmailRequest,
    SendEmailResponse,
    UpdateEmailRequest,
)
from synergie_mail.services.accounts import AccountRegistry
from synergie_mail.services.inbox import InboxService
from synergie_mail.services.sanitizer import strip_tags
from synergie_mail.services.templates import TemplateService
from synergie_mail.services.utils import validate_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/emails", tags=["Emails"])

PAGE_LIMIT = 50

# Services (will be set by main.py)
inbox: InboxService = None
accounts: AccountRegistry = None
templates: TemplateService = None


def set_services(i: InboxService, a: AccountRegistry, t: TemplateService):
    """Set the service instances for this router."""
    global inbox, accounts, templates
    inbox = i
    accounts = a
    templates = t


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.get("")
def list_emails(
    direction: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
):
    """Emails de la boîte (cache 30 s), filtrés, avec le statut de synchro."""
    logger.info("🔍 Récupération liste emails")
    emails, result = inbox.list_emails(direction=direction, status=status, search=search)

    if not result.ok:
        logger.warning("⚠️ Liste servie en mode dégradé : %s", result.reason)

    return {
        "emails": [e.to_dict() for e in emails],
        "pagination": {
            "page": 1,
            "limit": PAGE_LIMIT,
            "total": len(emails),
            "pages": 1,
        },
        "sync": result.sync_info(),
    }


@router.get("/stats")
def email_stats():
    return inbox.stats()


@router.post("/send", response_model=SendEmailResponse, response_model_exclude_none=True)
def send_email(req: SendEmailRequest):
    """
    Envoie un email, éventuellement à partir d'un template.

    Un échec SMTP n'est pas une erreur HTTP : la réponse porte
    `status: "degraded"` et un messageId simulé.
    """
    subject = req.subject
    html_content = req.htmlContent
    text_content = req.textContent

    if req.templateId and req.variables is not None:
        logger.info("🎨 Traitement template '%s'", req.templateId)
        processed = templates.process_template(req.templateId, req.variables)
        if processed is not None:
            subject = processed.subject
            html_content = processed.html_content
            text_content = processed.text_content

    if not req.to or not subject:
        logger.warning("❌ Champs requis manquants (to=%s, subject=%s)", bool(req.to), bool(subject))
        return _error(400, "Destinataire et sujet requis")

    if not validate_email(req.to):
        logger.warning("❌ Adresse destinataire invalide : %s", req.to)
        return _error(400, "Adresse email du destinataire invalide")

    mail_service = accounts.get_mail_service(req.accountId)
    if mail_service is None:
        return _error(400, f"Compte email {req.accountId or 'par défaut'} non disponible")

    result = mail_service.send_email(
        to=req.to,
        subject=subject,
        html=html_content,
        text=text_content or (strip_tags(html_content) if html_content else None),
        cc=req.cc,
        bcc=req.bcc,
    )

    if result.ok:
        inbox.invalidate()
        return SendEmailResponse(
            success=True,
            messageId=result.message_id,
            note="✅ Email envoyé via Hostinger",
            status=STATUS_OK,
        )

    logger.warning("📧 Envoi en échec, réponse simulée : %s", result.error)
    return SendEmailResponse(
        success=True,
        messageId=f"simulated-{int(time.time() * 1000)}",
        note="Email simulé - configuration Hostinger en cours",
        status=STATUS_DEGRADED,
        error=result.error,
    )


@router.post("/refresh", response_model=RefreshResponse)
def refresh_emails():
    """Vide le cache et relance immédiatement une synchro complète."""
    result = inbox.refresh()
    count = len(result.emails)
    if result.ok:
        message = f"Cache IMAP rafraîchi : {count} email(s)"
    else:
        message = f"Synchronisation IMAP indisponible : {result.reason}"

    return RefreshResponse(
        success=result.ok,
        message=message,
        emailCount=count,
        lastUpdate=datetime.now(timezone.utc).isoformat(),
        status=result.status,
    )


@router.post("/test-connection", response_model=ConnectionTestResponse)
def test_connection():
    """Login IMAP réel sur le compte par défaut."""
    mail_service = accounts.get_mail_service()
    return ConnectionTestResponse(success=bool(mail_service and mail_service.test_connection()))


@router.get("/{email_id}")
def get_email(email_id: int):
    """Email par id ; un email reçu est marqué comme lu (cache local)."""
    record = inbox.get_email(email_id)
    if record is None:
        return _error(404, "Email non trouvé")
    return record.to_dict()


@router.put("/{email_id}")
def update_email(email_id: int, req: UpdateEmailRequest):
    """Modifie un email dans le cache local (jamais répercuté sur le serveur)."""
    record = inbox.update_email(email_id, req.model_dump(exclude_unset=True))
    if record is None:
        return _error(404, "Email non trouvé")
    return record.to_dict()
