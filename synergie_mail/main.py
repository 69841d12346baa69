"""
Synergie Mail - FastAPI Application

Email subsystem of the sales back-office: IMAP inbox with a short-lived
cache, mobile-friendly rendering, commercial templates and multi-account
SMTP sending.
"""

import argparse
import logging
import sys
from typing import Any, Dict, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from synergie_mail.config import Config, ConfigError
from synergie_mail.routers import accounts, emails, health, templates
from synergie_mail.services.accounts import AccountRegistry
from synergie_mail.services.classifier import ContentClassifier
from synergie_mail.services.email_cache import EmailCache
from synergie_mail.services.email_parser import EmailParser
from synergie_mail.services.email_renderer import EmailRenderer
from synergie_mail.services.inbox import InboxService
from synergie_mail.services.templates import TemplateService
from synergie_mail.version import __version__ as APP_VERSION

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Construction du contexte (services)
# ---------------------------------------------------------------------------
def build_context(config: Config) -> Dict[str, Any]:
    """
    Instancie tous les services à partir de la configuration.

    Raises:
        ConfigError: mot de passe obligatoire absent, config incohérente.
    """
    config.validate()

    registry = AccountRegistry(config)
    default_account = registry.get_default_account()
    if default_account is None:
        raise ConfigError("Aucun compte email par défaut actif")

    parser = EmailParser(
        account_email=default_account.email,
        account_name=default_account.name,
        classifier=ContentClassifier(),
        renderer=EmailRenderer(config.template_dir),
        default_subject=config.default_subject,
        summary_length=config.summary_max_length,
    )
    inbox = InboxService(
        account=default_account,
        mail_service=registry.get_mail_service(),
        parser=parser,
        cache=EmailCache(duration=config.cache_duration),
        fetch_limit=config.imap_fetch_limit,
    )
    template_service = TemplateService(extra_path=config.email_templates_path)

    return {
        "config": config,
        "registry": registry,
        "inbox": inbox,
        "templates": template_service,
    }


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("❌ Erreur non gérée sur %s : %s", request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Erreur serveur"})


def create_app(config: Optional[Config] = None, context: Optional[Dict[str, Any]] = None) -> FastAPI:
    """Crée l'application FastAPI et branche les services sur les routers."""
    if context is None:
        context = build_context(config or Config())

    app = FastAPI(
        title="Synergie Mail",
        description="Boîte de réception IMAP, templates commerciaux et envoi multi-comptes",
        version=APP_VERSION,
    )
    app.add_exception_handler(Exception, _unhandled_error)

    # Set services for all routers
    emails.set_services(context["inbox"], context["registry"], context["templates"])
    templates.set_template_service(context["templates"])
    accounts.set_registry(context["registry"])
    health.set_services(context["inbox"], context["registry"])

    # Include routers
    app.include_router(health.router)
    app.include_router(emails.router)
    app.include_router(templates.router)
    app.include_router(accounts.router)

    app.state.context = context
    return app


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------
def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synergie Mail API")
    parser.add_argument("--host", default="0.0.0.0", help="Adresse d'écoute.")
    parser.add_argument("--port", type=int, default=8000, help="Port d'écoute.")
    parser.add_argument(
        "--check-config",
        action="store_true",
        help="Valide la configuration (mots de passe, comptes) puis s'arrête.",
    )
    return parser.parse_args(argv)


def main(argv=None) -> None:
    config = Config()
    app_logger = config.setup_logging()

    args = parse_args(argv)

    app_logger.info("Synergie Mail démarré - version %s", APP_VERSION)

    try:
        context = build_context(config)
    except ConfigError as e:
        app_logger.error("❌ Configuration invalide : %s", e)
        sys.exit(1)

    if args.check_config:
        app_logger.info("✅ Configuration valide")
        return

    app = create_app(context=context)
    uvicorn.run(app, host=args.host, port=args.port, log_level=config.log_level_str.lower())


if __name__ == "__main__":
    main()
