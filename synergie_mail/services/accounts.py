"""
Registre des comptes email d'envoi (un compte par service de l'entreprise).

Un compte optionnel n'est actif que si son mot de passe est fourni par
l'environnement. Le compte par défaut est obligatoire : son absence fait
échouer le démarrage.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

from synergie_mail.config import ConfigError
from synergie_mail.models import DEPARTMENTS, EmailAccount, SmtpSettings
from synergie_mail.services.mail import MailService

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from synergie_mail.config import Config

MAIL_DOMAIN = "synergiemarketingroup.fr"

# id, nom, boîte, service, variable du mot de passe, description, signature
ACCOUNT_DEFINITIONS: List[Dict[str, Any]] = [
    {
        "id": "recrutement-principal",
        "name": "Équipe Recrutement",
        "mailbox": "recrutement",
        "department": "recrutement",
        "password_env": "HOSTINGER_EMAIL_PASSWORD",
        "from_name": "Synergie Marketing Group - Recrutement",
        "description": "Compte principal pour le recrutement et la prospection vendeurs",
        "signature": "\n\n--\nÉquipe Recrutement\nSynergie Marketing Group\n📧 recrutement@synergiemarketingroup.fr",
        "is_default": True,
        "required": True,
    },
    {
        "id": "commercial-ventes",
        "name": "Équipe Commerciale",
        "mailbox": "commercial",
        "department": "commercial",
        "password_env": "COMMERCIAL_EMAIL_PASSWORD",
        "from_name": "Synergie Marketing Group - Commercial",
        "description": "Compte dédié aux communications commerciales et suivi clients",
        "signature": (
            "\n\n--\nÉquipe Commerciale\nSynergie Marketing Group\n"
            "📧 commercial@synergiemarketingroup.fr\n📞 Numéro commercial"
        ),
    },
    {
        "id": "support-technique",
        "name": "Support Technique",
        "mailbox": "support",
        "department": "support",
        "password_env": "SUPPORT_EMAIL_PASSWORD",
        "from_name": "Synergie Marketing Group - Support",
        "description": "Compte pour le support technique et assistance utilisateurs",
        "signature": "\n\n--\nSupport Technique\nSynergie Marketing Group\n📧 support@synergiemarketingroup.fr",
    },
    {
        "id": "direction-generale",
        "name": "Direction Générale",
        "mailbox": "direction",
        "department": "direction",
        "password_env": "DIRECTION_EMAIL_PASSWORD",
        "from_name": "Synergie Marketing Group - Direction",
        "description": "Compte direction pour communications officielles et management",
        "signature": "\n\n--\nDirection Générale\nSynergie Marketing Group\n📧 direction@synergiemarketingroup.fr",
    },
]


def build_account(definition: Dict[str, Any], config: "Config") -> EmailAccount:
    """Construit un EmailAccount à partir de sa définition et de la config."""
    address = f"{definition['mailbox']}@{MAIL_DOMAIN}"
    password = config.get_password(definition["password_env"])
    active = password is not None

    return EmailAccount(
        id=definition["id"],
        name=definition["name"],
        email=address,
        smtp_settings=SmtpSettings(
            host=config.smtp_server,
            port=config.smtp_port,
            secure=config.smtp_secure,
            user=address,
            password=password,
            from_email=address,
            from_name=definition["from_name"],
            reply_to=address,
            signature=definition.get("signature", ""),
            is_active=active,
        ),
        department=definition["department"],
        description=definition.get("description", ""),
        is_default=definition.get("is_default", False),
        is_active=active,
        password_env=definition["password_env"],
        required=definition.get("required", False),
    )


class AccountRegistry:
    """
    Gestion multi-comptes : sélection du compte d'envoi et accès à son
    MailService.
    """

    def __init__(
        self,
        config: "Config",
        definitions: Optional[List[Dict[str, Any]]] = None,
        mail_service_factory: Callable[[EmailAccount, "Config"], MailService] = MailService,
    ) -> None:
        self.config = config
        self._factory = mail_service_factory
        self._accounts: List[EmailAccount] = [
            build_account(d, config) for d in (definitions or ACCOUNT_DEFINITIONS)
        ]
        self._services: Dict[str, MailService] = {}

        self._check_accounts()

        for account in self._accounts:
            if account.is_active:
                self._services[account.id] = self._factory(account, config)

        logger.info(
            "📬 %d compte(s) email actif(s) sur %d : %s",
            len(self._services),
            len(self._accounts),
            ", ".join(self._services) or "aucun",
        )

    def _check_accounts(self) -> None:
        missing = [a.password_env for a in self._accounts if a.required and not a.is_active]
        if missing:
            raise ConfigError(
                "Mot de passe obligatoire manquant pour : " + ", ".join(missing)
            )

        defaults = [a.id for a in self._accounts if a.is_default and a.is_active]
        if len(defaults) > 1:
            raise ConfigError(
                "Plusieurs comptes actifs marqués par défaut : " + ", ".join(defaults)
            )

        for account in self._accounts:
            if account.department not in DEPARTMENTS:
                raise ConfigError(
                    f"Service inconnu pour {account.id} : {account.department}"
                )

    # ------------------------------------------------------------------ #
    # Lecture
    # ------------------------------------------------------------------ #
    @property
    def accounts(self) -> List[EmailAccount]:
        return list(self._accounts)

    def get_active_accounts(self) -> List[EmailAccount]:
        return [a for a in self._accounts if a.is_active]

    def get_accounts_by_department(self, department: str) -> List[EmailAccount]:
        return [a for a in self._accounts if a.department == department and a.is_active]

    def get_default_account(self) -> Optional[EmailAccount]:
        return next((a for a in self._accounts if a.is_default and a.is_active), None)

    def get_account(self, account_id: str) -> Optional[EmailAccount]:
        return next((a for a in self._accounts if a.id == account_id), None)

    def get_mail_service(self, account_id: Optional[str] = None) -> Optional[MailService]:
        """MailService du compte demandé (compte par défaut si aucun id)."""
        if not account_id:
            default = self.get_default_account()
            account_id = default.id if default else None
        if not account_id:
            return None
        return self._services.get(account_id)

    # ------------------------------------------------------------------ #
    # Gestion
    # ------------------------------------------------------------------ #
    def activate_account(self, account_id: str, password: str) -> bool:
        """Active un compte à chaud avec le mot de passe fourni."""
        account = self.get_account(account_id)
        if account is None or not password:
            return False

        if account.is_default and not account.is_active:
            current = self.get_default_account()
            if current is not None and current.id != account.id:
                logger.warning(
                    "⚠️ %s marqué par défaut mais %s l'est déjà, activation refusée",
                    account.id,
                    current.id,
                )
                return False

        account.smtp_settings.password = password
        account.smtp_settings.is_active = True
        account.is_active = True
        self._services[account.id] = self._factory(account, self.config)

        logger.info("✅ Compte email %s activé", account.id)
        return True

    def test_account_connection(self, account_id: str) -> bool:
        service = self._services.get(account_id)
        if service is None:
            return False
        return service.test_connection()

    def get_accounts_stats(self) -> Dict[str, Any]:
        return {
            "total": len(self._accounts),
            "active": len(self.get_active_accounts()),
            "byDepartment": {
                dep: sum(1 for a in self._accounts if a.department == dep)
                for dep in ("recrutement", "commercial", "support", "direction")
            },
        }
