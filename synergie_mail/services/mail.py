import logging
import smtplib
import socket
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid
from typing import Any, Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING

from imapclient import IMAPClient

from synergie_mail.models import STATUS_ERROR, STATUS_OK, EmailAccount, SendResult
from synergie_mail.services import utils

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from synergie_mail.config import Config


def _error_text(error: Exception) -> str:
    return str(error) or error.__class__.__name__


class MailService:
    """
    Service responsable des interactions IMAP/SMTP d'un compte email.

    - Lecture des messages récents (connexion courte par synchro, lecture seule).
    - Envoi d'emails via SMTP (STARTTLS ou SSL direct).
    - Test de connexion réel (login IMAP).
    """

    def __init__(self, account: EmailAccount, config: "Config") -> None:
        self.account = account
        self.config = config
        self.settings = account.smtp_settings

        # Timeouts (en secondes).
        self.imap_timeout = getattr(config, "imap_timeout", 30)
        self.smtp_timeout = getattr(config, "smtp_timeout", 30)

        self.imap_folder = getattr(config, "imap_folder", "INBOX") or "INBOX"
        self.fetch_limit = getattr(config, "imap_fetch_limit", 50)

    # ------------------------------------------------------------------ #
    # IMAP (Réception des emails)
    # ------------------------------------------------------------------ #
    def _connect(self) -> IMAPClient:
        """Établit une nouvelle connexion IMAP authentifiée."""
        try:
            logger.info(
                "Connexion IMAP à %s:%s (timeout=%ss, folder=%s, compte=%s)...",
                self.config.imap_server,
                self.config.imap_port,
                self.imap_timeout,
                self.imap_folder,
                self.account.id,
            )
            server = IMAPClient(
                self.config.imap_server,
                port=self.config.imap_port,
                ssl=True,
                timeout=self.imap_timeout,
            )
            server.login(self.settings.user, self.settings.password)
            logger.debug("Authentification IMAP réussie.")
            return server
        except IMAPClient.Error as e:
            logger.error("Échec connexion IMAP (protocole IMAP) : %s", e)
            raise
        except (socket.timeout, socket.gaierror, OSError) as e:
            logger.error("Échec connexion IMAP (erreur réseau) : %s", e)
            raise

    @staticmethod
    def _logout(server: IMAPClient) -> None:
        try:
            server.logout()
        except (IMAPClient.Error, OSError) as e:
            logger.debug("Logout IMAP ignoré : %s", e)

    def fetch_messages(self, limit: Optional[int] = None) -> List[Tuple[int, Dict[Any, Any]]]:
        """
        Récupère les derniers messages du dossier, du plus récent au plus ancien.

        Les exceptions IMAP / réseau remontent à l'appelant.

        Returns:
            List[Tuple[int, dict]]: couples (uid, réponse FETCH RFC822 + FLAGS).
        """
        limit = limit or self.fetch_limit
        server = self._connect()
        try:
            server.select_folder(self.imap_folder, readonly=True)
            uids = server.search(["ALL"])
            logger.info("📧 %d email(s) trouvé(s) dans %s", len(uids), self.imap_folder)

            recent = sorted(uids)[-limit:]
            if not recent:
                return []

            response = server.fetch(recent, ["RFC822", "FLAGS"])
            return [(uid, response[uid]) for uid in reversed(recent) if uid in response]
        finally:
            self._logout(server)

    def test_connection(self) -> bool:
        """Tente un login IMAP réel. Ne lève jamais d'exception."""
        if not self.settings.password:
            logger.warning("⚠️ Compte %s sans mot de passe, test impossible", self.account.id)
            return False
        try:
            server = self._connect()
        except (IMAPClient.Error, OSError) as e:
            logger.warning("❌ Test de connexion échoué (%s) : %s", self.account.id, e)
            return False
        self._logout(server)
        logger.info("✅ Connexion IMAP OK pour %s", self.account.email)
        return True

    # ------------------------------------------------------------------ #
    # SMTP (Envoi)
    # ------------------------------------------------------------------ #
    def _open_smtp(self) -> smtplib.SMTP:
        if self.settings.secure:
            return smtplib.SMTP_SSL(
                self.settings.host, self.settings.port, timeout=self.smtp_timeout
            )
        return smtplib.SMTP(self.settings.host, self.settings.port, timeout=self.smtp_timeout)

    def _send_message_smtp(
        self,
        msg: MIMEMultipart,
        recipients: Sequence[str],
        log_context: str,
    ) -> Optional[str]:
        """
        Envoi générique d'un message SMTP avec gestion d'erreurs détaillée.
        Retourne None si succès, le message d'erreur sinon.
        """
        try:
            logger.debug(
                "Connexion SMTP à %s:%s (secure=%s, timeout=%ss) pour %s...",
                self.settings.host,
                self.settings.port,
                self.settings.secure,
                self.smtp_timeout,
                log_context,
            )
            with self._open_smtp() as server:
                if not self.settings.secure:
                    server.starttls()
                server.login(self.settings.user, self.settings.password or "")
                server.send_message(msg, to_addrs=list(recipients))

            logger.info("✅ Email SMTP envoyé (%s)", log_context)
            return None

        except smtplib.SMTPAuthenticationError as e:
            logger.error("❌ Échec authentification SMTP (%s) : %s", log_context, e)
            return _error_text(e)
        except (smtplib.SMTPConnectError, smtplib.SMTPServerDisconnected) as e:
            logger.error("❌ Échec connexion SMTP (%s) : %s", log_context, e)
            return _error_text(e)
        except smtplib.SMTPException as e:
            logger.error("❌ Erreur SMTP (%s) : %s", log_context, e, exc_info=True)
            return _error_text(e)
        except (socket.timeout, OSError) as e:
            logger.error("❌ Timeout / erreur réseau SMTP (%s) : %s", log_context, e)
            return _error_text(e)

    def send_email(
        self,
        to: str,
        subject: str,
        html: Optional[str] = None,
        text: Optional[str] = None,
        cc: Optional[List[str]] = None,
        bcc: Optional[List[str]] = None,
    ) -> SendResult:
        """
        Envoie un email depuis ce compte.

        Le corps HTML reçoit la signature du compte ; sans HTML, le texte
        sert aussi de corps HTML.
        """
        if not self.settings.password:
            return SendResult(
                status=STATUS_ERROR,
                error=f"Compte {self.account.id} sans mot de passe configuré",
            )

        msg = MIMEMultipart("alternative")
        msg["From"] = utils.format_email_address(self.settings.from_email, self.settings.from_name)
        msg["To"] = to
        msg["Subject"] = subject
        if cc:
            msg["Cc"] = ", ".join(cc)
        if self.settings.reply_to:
            msg["Reply-To"] = self.settings.reply_to
        message_id = make_msgid(domain=self.settings.from_email.split("@")[-1])
        msg["Message-ID"] = message_id

        if text:
            msg.attach(MIMEText(text, "plain", "utf-8"))
        body_html = html or text or ""
        msg.attach(MIMEText(utils.add_signature(body_html, self.settings.signature), "html", "utf-8"))

        recipients = [to] + list(cc or []) + list(bcc or [])
        error = self._send_message_smtp(msg, recipients, log_context=f"envoi à {to}")
        if error is not None:
            return SendResult(status=STATUS_ERROR, error=error)
        return SendResult(status=STATUS_OK, message_id=message_id)
