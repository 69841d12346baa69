import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

from imapclient import IMAPClient

from synergie_mail.models import STATUS_DEGRADED, STATUS_OK, EmailAccount, EmailRecord, FetchResult
from synergie_mail.services.email_cache import EmailCache
from synergie_mail.services.email_parser import EmailParser
from synergie_mail.services.mail import MailService

logger = logging.getLogger(__name__)

PLACEHOLDER_SUBJECT = "Emails en cours de synchronisation..."
PLACEHOLDER_TEXT = "La synchronisation IMAP est en cours. Vos emails apparaîtront sous peu."
SYSTEM_SENDER = "system@synergiemarketingroup.fr"

# Champs modifiables via PUT (camelCase -> attribut)
_PATCHABLE_FIELDS = {
    camel: attr for camel, attr in EmailRecord.camel_fields().items() if camel != "id"
}


class InboxService:
    """
    Orchestration de la boîte de réception du compte par défaut.

    - synchro IMAP -> EmailRecord (via EmailParser), du plus récent au plus ancien
    - cache mémoire à durée courte (EmailCache)
    - repli sur un email factice "synchronisation en cours" si l'IMAP échoue
    - filtres, statistiques et modifications locales (jamais renvoyées au serveur)
    """

    def __init__(
        self,
        account: EmailAccount,
        mail_service: MailService,
        parser: EmailParser,
        cache: EmailCache,
        fetch_limit: int = 50,
    ) -> None:
        self.account = account
        self.mail_service = mail_service
        self.parser = parser
        self.cache = cache
        self.fetch_limit = fetch_limit

    # ------------------------------------------------------------------ #
    # Synchro
    # ------------------------------------------------------------------ #
    def fetch_emails(self) -> FetchResult:
        """Synchro complète, sans passer par le cache."""
        logger.info("🔍 Récupération emails via IMAP (%s)...", self.account.email)
        try:
            messages = self.mail_service.fetch_messages(self.fetch_limit)
        except (IMAPClient.Error, OSError) as e:
            logger.error("❌ Erreur récupération IMAP : %s", e)
            return self._degraded(str(e) or e.__class__.__name__)

        emails: List[EmailRecord] = []
        for index, (uid, data) in enumerate(messages):
            try:
                emails.append(self.parser.parse(uid, data, index=index))
            except (ValueError, TypeError) as e:
                logger.warning("⚠️ Email UID %s ignoré (illisible) : %s", uid, e)

        logger.info("✅ %d email(s) formaté(s) et récupéré(s)", len(emails))
        return FetchResult(status=STATUS_OK, emails=emails)

    def _degraded(self, reason: str) -> FetchResult:
        return FetchResult(
            status=STATUS_DEGRADED,
            emails=[self.placeholder_record()],
            reason=reason,
        )

    def placeholder_record(self) -> EmailRecord:
        return EmailRecord(
            id=1,
            subject=PLACEHOLDER_SUBJECT,
            from_email=SYSTEM_SENDER,
            from_name="Système",
            to_email=self.account.email,
            to_name=self.account.name,
            direction="inbound",
            created_at=datetime.now(timezone.utc).isoformat(),
            html_content=f"<p>{PLACEHOLDER_TEXT}</p>",
            text_content=PLACEHOLDER_TEXT,
            is_placeholder=True,
        )

    def get_emails(self) -> FetchResult:
        """Lecture via le cache (synchro seulement si le cache est périmé)."""
        return self.cache.get(self.fetch_emails)

    def refresh(self) -> FetchResult:
        logger.info("🔄 Actualisation forcée des emails")
        return self.cache.refresh(self.fetch_emails)

    def invalidate(self) -> None:
        self.cache.invalidate()

    # ------------------------------------------------------------------ #
    # Lecture
    # ------------------------------------------------------------------ #
    def list_emails(
        self,
        direction: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[EmailRecord], FetchResult]:
        """Emails filtrés + résultat de synchro (pour exposer son statut)."""
        result = self.get_emails()
        emails = list(result.emails)

        if direction:
            emails = [e for e in emails if e.direction == direction]
        if status:
            emails = [e for e in emails if e.status == status]
        if search:
            needle = search.lower()
            emails = [
                e for e in emails
                if needle in e.subject.lower() or needle in e.from_email.lower()
            ]

        return emails, result

    def stats(self) -> Dict[str, int]:
        emails = self.get_emails().emails
        return {
            "total": len(emails),
            "nonLus": sum(1 for e in emails if e.direction == "inbound" and not e.is_read),
            "favoris": sum(1 for e in emails if e.is_starred),
            "important": sum(1 for e in emails if e.is_important),
            "recus": sum(1 for e in emails if e.direction == "inbound"),
            "envoyes": sum(1 for e in emails if e.direction == "outbound"),
        }

    def _find(self, email_id: int) -> Optional[EmailRecord]:
        return next((e for e in self.get_emails().emails if e.id == email_id), None)

    def get_email(self, email_id: int, mark_read: bool = True) -> Optional[EmailRecord]:
        """Email par id ; un email reçu non lu est marqué comme lu."""
        record = self._find(email_id)
        if record is not None and mark_read and record.direction == "inbound" and not record.is_read:
            record.is_read = True
            logger.debug("Email %s marqué comme lu", email_id)
        return record

    # ------------------------------------------------------------------ #
    # Modification locale
    # ------------------------------------------------------------------ #
    def update_email(self, email_id: int, patch: Mapping[str, Any]) -> Optional[EmailRecord]:
        """
        Fusion superficielle des champs connus (camelCase) dans l'email en cache.

        `id` n'est pas modifiable ; les clés inconnues sont ignorées.
        """
        record = self._find(email_id)
        if record is None:
            return None

        ignored = []
        for key, value in patch.items():
            attr = _PATCHABLE_FIELDS.get(key)
            if attr is None:
                ignored.append(key)
                continue
            setattr(record, attr, value)

        if ignored:
            logger.debug("Champs ignorés pour l'email %s : %s", email_id, ignored)
        return record
