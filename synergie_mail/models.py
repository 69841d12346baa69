from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

# Statuts des résultats de synchro / d'envoi
STATUS_OK = "ok"
STATUS_DEGRADED = "degraded"
STATUS_ERROR = "error"

DIRECTIONS = ("inbound", "outbound")
TEMPLATE_CATEGORIES = ["prospection", "suivi", "commercial", "support", "notification"]
DEPARTMENTS = ("commercial", "support", "direction", "recrutement")


def _to_camel(name: str) -> str:
    head, *tail = name.split("_")
    return head + "".join(part.capitalize() for part in tail)


@dataclass
class EmailRecord:
    """
    Représentation normalisée d'un email de la boîte IMAP.

    Construite à chaque synchro, jamais persistée. Les drapeaux
    (is_read, is_starred, ...) ne vivent que dans le cache local.
    """
    id: int
    subject: str
    from_email: str
    from_name: str
    to_email: str
    to_name: str
    direction: str
    created_at: str
    html_content: str
    text_content: str
    images: List[str] = field(default_factory=list)

    status: str = "delivered"
    is_read: bool = False
    is_starred: bool = False
    is_important: bool = False
    is_placeholder: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Vue JSON (camelCase) consommée par le frontend."""
        return {
            _to_camel(f.name): (
                list(getattr(self, f.name)) if f.name == "images" else getattr(self, f.name)
            )
            for f in fields(self)
        }

    @classmethod
    def camel_fields(cls) -> Dict[str, str]:
        """Correspondance camelCase -> nom d'attribut."""
        return {_to_camel(f.name): f.name for f in fields(cls)}


@dataclass
class EmailTemplate:
    id: str
    name: str
    category: str
    subject: str
    html_content: str
    text_content: str
    variables: List[str]
    description: str = ""
    is_active: bool = True
    created_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "subject": self.subject,
            "htmlContent": self.html_content,
            "textContent": self.text_content,
            "variables": list(self.variables),
            "description": self.description,
            "isActive": self.is_active,
            "createdAt": self.created_at,
        }


@dataclass(frozen=True)
class ProcessedTemplate:
    subject: str
    html_content: str
    text_content: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "subject": self.subject,
            "htmlContent": self.html_content,
            "textContent": self.text_content,
        }


@dataclass
class SmtpSettings:
    host: str
    port: int
    secure: bool
    user: str
    password: Optional[str]
    from_email: str
    from_name: str
    reply_to: str = ""
    signature: str = ""
    is_active: bool = True


@dataclass
class EmailAccount:
    id: str
    name: str
    email: str
    smtp_settings: SmtpSettings
    department: str
    description: str = ""
    is_default: bool = False
    is_active: bool = False
    # Variable d'environnement portant le mot de passe du compte
    password_env: str = ""
    # Compte indispensable au démarrage (échec si mot de passe absent)
    required: bool = False

    def public_dict(self) -> Dict[str, Any]:
        """Métadonnées exposées par l'API, sans aucun secret."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "department": self.department,
            "description": self.description,
            "isDefault": self.is_default,
            "isActive": self.is_active,
        }


@dataclass
class FetchResult:
    """Résultat d'une synchro IMAP : ok, ou degraded avec un email factice."""
    status: str
    emails: List[EmailRecord]
    reason: Optional[str] = None
    fetched_at: Optional[float] = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    def sync_info(self) -> Dict[str, Optional[str]]:
        return {"status": self.status, "reason": self.reason}


@dataclass
class SendResult:
    """Résultat d'un envoi SMTP (ok ou error, jamais d'exception)."""
    status: str
    message_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK
