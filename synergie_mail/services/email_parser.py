import email
import logging
from datetime import datetime, timezone
from email.message import Message
from email.utils import parsedate_to_datetime
from typing import Any, Iterable, Optional, Tuple

from synergie_mail.models import EmailRecord
from synergie_mail.services.classifier import ContentClassifier
from synergie_mail.services.email_renderer import EmailRenderer
from synergie_mail.services.mime_decoder import decode_email_header, decode_part
from synergie_mail.services.sanitizer import (
    SUMMARY_LENGTH,
    apply_fallback,
    clean_text,
    extract_images,
    summarize,
)
from synergie_mail.services.utils import split_address, truncate_log

logger = logging.getLogger(__name__)

SEEN_FLAG = "\\Seen"
FLAGGED_FLAG = "\\Flagged"


class EmailParser:
    """
    Responsabilité : convertir la réponse IMAP brute en EmailRecord.

    - construit l'objet email.message.Message
    - décode les parties texte (quoted-printable, charsets)
    - nettoie le HTML pour l'affichage mobile, ou le remplace par un
      fragment statique quand l'expéditeur est un automate connu
    - extrait les métadonnées (sujet, from, to, date, flags IMAP)
    """

    def __init__(
        self,
        account_email: str,
        account_name: str = "",
        classifier: Optional[ContentClassifier] = None,
        renderer: Optional[EmailRenderer] = None,
        default_subject: str = "Sans sujet",
        summary_length: int = SUMMARY_LENGTH,
    ) -> None:
        self.account_email = account_email
        self.account_name = account_name
        self.classifier = classifier or ContentClassifier()
        self.renderer = renderer or EmailRenderer()
        self.default_subject = default_subject
        self.summary_length = summary_length

    # ------------------------------------------------------------------ #
    # API publique
    # ------------------------------------------------------------------ #
    def parse(self, uid: Optional[int], message_data: Any, index: int = 0) -> EmailRecord:
        """
        Transforme un message IMAP brut (RFC822 + FLAGS) en EmailRecord.

        Args:
            uid: UID IMAP (None si inconnu : l'index 1-based est utilisé).
            message_data: Réponse IMAP pour ce message (dict ou RFC822 brut).
            index: Position du message dans la synchro, pour l'id de repli.
        """
        msg = self._extract_message_object(uid, message_data)
        flags = self._extract_flags(message_data)

        subject = decode_email_header(msg.get("Subject")) or self.default_subject
        from_name, from_email = split_address(decode_email_header(msg.get("From")))
        to_name, to_email = split_address(decode_email_header(msg.get("To")))
        if not to_email:
            to_name, to_email = self.account_name, self.account_email

        direction = (
            "outbound"
            if from_email and from_email.lower() == self.account_email.lower()
            else "inbound"
        )

        logger.info(
            "📨 Traitement UID %s | Sujet: %s | De: %s",
            uid,
            subject,
            from_email,
        )

        html_content, text_content, images = self._build_content(uid, msg)

        return EmailRecord(
            id=uid or index + 1,
            subject=subject,
            from_email=from_email,
            from_name=from_name,
            to_email=to_email,
            to_name=to_name,
            direction=direction,
            created_at=self._parse_date(msg.get("Date")),
            html_content=html_content,
            text_content=text_content,
            images=images,
            is_read=SEEN_FLAG in flags,
            is_starred=FLAGGED_FLAG in flags,
        )

    # ------------------------------------------------------------------ #
    # Helpers internes
    # ------------------------------------------------------------------ #
    def _extract_message_object(self, uid: Optional[int], message_data: Any) -> Message:
        """Récupère un objet email.message.Message à partir de la réponse IMAP."""
        if isinstance(message_data, dict):
            raw_msg = message_data.get(b"RFC822") or message_data.get("RFC822")
        else:
            raw_msg = message_data

        if raw_msg is None:
            logger.error(
                "UID %s : pas de section RFC822 dans message_data=%r",
                uid,
                message_data,
            )
            raise ValueError("Message IMAP sans section RFC822")

        if isinstance(raw_msg, (bytes, bytearray)):
            return email.message_from_bytes(bytes(raw_msg))
        if isinstance(raw_msg, Message):
            return raw_msg
        if isinstance(raw_msg, str):
            return email.message_from_string(raw_msg)

        raise TypeError(
            f"Type inattendu pour raw_msg (UID={uid}) : {type(raw_msg)}"
        )

    @staticmethod
    def _extract_flags(message_data: Any) -> Tuple[str, ...]:
        if not isinstance(message_data, dict):
            return ()
        raw_flags: Iterable[Any] = message_data.get(b"FLAGS") or message_data.get("FLAGS") or ()
        return tuple(
            f.decode("ascii", errors="replace") if isinstance(f, (bytes, bytearray)) else str(f)
            for f in raw_flags
        )

    @staticmethod
    def _parse_date(value: Optional[str]) -> str:
        """Date ISO-8601 ; en-tête brut s'il est illisible ; maintenant (UTC) s'il manque."""
        if not value:
            return datetime.now(timezone.utc).isoformat()
        try:
            return parsedate_to_datetime(value).isoformat()
        except (TypeError, ValueError, IndexError):
            logger.debug("Date illisible, conservée brute : %r", value)
            return str(value)

    @staticmethod
    def _split_bodies(msg: Message) -> Tuple[str, str]:
        """Texte décodé des parties text/plain et text/html (hors pièces jointes)."""
        plain_chunks = []
        html_chunks = []

        parts = msg.walk() if msg.is_multipart() else [msg]
        for part in parts:
            if part.is_multipart():
                continue

            ctype = (part.get_content_type() or "").lower()
            disp = (part.get("Content-Disposition") or "").lower()

            # Ignorer les pièces jointes
            if "attachment" in disp:
                continue

            if ctype == "text/plain":
                plain_chunks.append(decode_part(part))
            elif ctype == "text/html":
                html_chunks.append(decode_part(part))

        return "".join(plain_chunks).strip(), "".join(html_chunks).strip()

    def _build_content(self, uid: Optional[int], msg: Message) -> Tuple[str, str, list]:
        """
        Produit (htmlContent, textContent, images).

        L'affichage part du HTML quand il existe, sinon du texte brut.
        Le résumé textContent privilégie la partie text/plain.
        """
        plain, html_body = self._split_bodies(msg)
        display_raw = html_body or plain

        logger.debug("UID %s contenu brut :\n%s", uid, truncate_log(display_raw))

        cleaned = clean_text(display_raw)
        classification = self.classifier.classify(display_raw, cleaned)
        if classification is not None:
            html_content = self.renderer.render_fragment(classification.fragment)
        else:
            html_content = self.renderer.render_email_view(
                apply_fallback(cleaned, self.classifier.fallback_text(display_raw))
            )

        summary_raw = plain or html_body
        summary_text = self.classifier.display_text(summary_raw, clean_text(summary_raw))
        text_content = summarize(summary_text, self.summary_length)

        return html_content, text_content, extract_images(display_raw)
