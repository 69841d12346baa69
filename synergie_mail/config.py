import os
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional


class ConfigError(RuntimeError):
    """Configuration invalide ou incomplète détectée au démarrage."""


# Variables d'environnement des mots de passe, par compte email.
ACCOUNT_PASSWORD_ENVS = (
    "HOSTINGER_EMAIL_PASSWORD",
    "COMMERCIAL_EMAIL_PASSWORD",
    "SUPPORT_EMAIL_PASSWORD",
    "DIRECTION_EMAIL_PASSWORD",
)


class Config:
    """
    Configuration centrale du service email.

    Toutes les variables d'environnement utiles sont lues ici une seule
    fois. Aucun secret n'a de valeur par défaut : `validate()` échoue
    bruyamment si un mot de passe obligatoire est absent.
    """

    def __init__(self) -> None:
        # ------------------------------------------------------------------
        # LOGGING
        # ------------------------------------------------------------------
        self.log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.log_level = getattr(logging, self.log_level_str, logging.INFO)

        self.log_max_bytes = int(os.getenv("LOG_MAX_BYTES", str(10 * 1024 * 1024)))
        self.log_backup_count = int(os.getenv("LOG_BACKUP_COUNT", "5"))

        # Fichier de log optionnel (sinon console uniquement)
        log_path_str = os.getenv("LOG_PATH", "").strip()
        self.log_path: Optional[Path] = Path(log_path_str) if log_path_str else None

        # ------------------------------------------------------------------
        # IMAP (lecture de la boîte)
        # ------------------------------------------------------------------
        self.imap_server = os.getenv("IMAP_SERVER", "imap.hostinger.com")
        self.imap_port = int(os.getenv("IMAP_PORT", "993"))
        self.imap_folder = os.getenv("IMAP_FOLDER", "INBOX")
        self.imap_timeout = int(os.getenv("IMAP_TIMEOUT", "30"))
        # Nombre max de messages récents rapatriés à chaque synchro
        self.imap_fetch_limit = int(os.getenv("IMAP_FETCH_LIMIT", "50"))

        # ------------------------------------------------------------------
        # SMTP (envoi)
        # ------------------------------------------------------------------
        self.smtp_server = os.getenv("SMTP_SERVER", "smtp.hostinger.com")
        self.smtp_port = int(os.getenv("SMTP_PORT", "587"))
        # true => SSL direct (port 465), false => STARTTLS
        self.smtp_secure = self._get_bool("SMTP_SECURE", False)
        self.smtp_timeout = int(os.getenv("SMTP_TIMEOUT", "30"))

        # ------------------------------------------------------------------
        # COMPTES EMAIL (mots de passe, jamais de valeur par défaut)
        # ------------------------------------------------------------------
        self.account_passwords: Dict[str, Optional[str]] = {
            env: (os.getenv(env) or "").strip() or None
            for env in ACCOUNT_PASSWORD_ENVS
        }

        # ------------------------------------------------------------------
        # CACHE / DEFAULTS
        # ------------------------------------------------------------------
        self.cache_duration = float(os.getenv("EMAIL_CACHE_DURATION", "30"))
        self.default_subject = os.getenv("DEFAULT_SUBJECT", "Sans sujet")
        self.summary_max_length = int(os.getenv("SUMMARY_MAX_LENGTH", "300"))

        # ------------------------------------------------------------------
        # TEMPLATES
        # ------------------------------------------------------------------
        # Répertoire des templates Jinja2 d'affichage (wrapper + fragments)
        self.template_dir = Path(
            os.getenv("TEMPLATE_DIR", str(Path(__file__).parent / "templates"))
        )
        # Fichier JSON optionnel de templates d'emails supplémentaires
        templates_path_str = os.getenv("EMAIL_TEMPLATES_PATH", "").strip()
        self.email_templates_path: Optional[Path] = (
            Path(templates_path_str) if templates_path_str else None
        )

    # ======================================================================
    #  HELPERS INTERNES
    # ======================================================================
    @staticmethod
    def _get_bool(env_name: str, default: bool = False) -> bool:
        return os.getenv(env_name, str(default)).strip().lower() == "true"

    def get_password(self, env_name: str) -> Optional[str]:
        return self.account_passwords.get(env_name)

    # ======================================================================
    #  VALIDATION
    # ======================================================================
    def validate(self, required_envs=("HOSTINGER_EMAIL_PASSWORD",)) -> None:
        """
        Vérifie la présence des secrets obligatoires.

        Raises:
            ConfigError: si une variable requise est absente ou vide.
        """
        missing = [env for env in required_envs if not self.get_password(env)]
        if missing:
            raise ConfigError(
                "Variables d'environnement obligatoires manquantes : "
                + ", ".join(missing)
            )
        if self.cache_duration < 0:
            raise ConfigError("EMAIL_CACHE_DURATION doit être positif")
        if self.imap_fetch_limit <= 0:
            raise ConfigError("IMAP_FETCH_LIMIT doit être strictement positif")

    # ======================================================================
    #  LOGGING
    # ======================================================================
    def setup_logging(self) -> logging.Logger:
        formatter = logging.Formatter(
            "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
        )

        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        handlers = [stream_handler]

        if self.log_path is not None:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                self.log_path,
                maxBytes=self.log_max_bytes,
                backupCount=self.log_backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            handlers.append(file_handler)

        logging.basicConfig(level=self.log_level, handlers=handlers)

        # Limiter le bruit de certaines libs
        logging.getLogger("imapclient").setLevel(logging.INFO)
        logging.getLogger("imaplib").setLevel(logging.INFO)
        logging.getLogger("multipart").setLevel(logging.INFO)

        logging.getLogger("synergie_mail").setLevel(self.log_level)

        logger = logging.getLogger("SynergieMail")
        logger.info("Système de log initialisé au niveau : %s", self.log_level_str)
        return logger
