"""
Service de rendu HTML des emails reçus.
Gère la mise en page mobile et les fragments statiques via des templates Jinja2.
"""

import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


class EmailRenderer:
    """Génère le HTML affiché à partir des templates Jinja2."""

    def __init__(self, template_dir: Path = DEFAULT_TEMPLATE_DIR):
        """
        Initialise le moteur de templates.

        Args:
            template_dir: Répertoire contenant les fichiers de templates Jinja2.
        """
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape(["html"]),
        )

    # ------------------------------------------------------------------ #
    # Affichage générique
    # ------------------------------------------------------------------ #
    def render_email_view(self, body_text: str, title: str = "📧 Email reçu") -> str:
        """
        Enveloppe le texte nettoyé dans la mise en page mobile
        (bandeau + bloc `white-space: pre-line`).

        Args:
            body_text: Texte brut déjà nettoyé (échappé au rendu).
            title: Libellé du bandeau.

        Returns:
            str: Fragment HTML.
        """
        template = self.env.get_template("email_view.html")
        return template.render(body_text=body_text, title=title)

    # ------------------------------------------------------------------ #
    # Fragments statiques (expéditeurs automatiques connus)
    # ------------------------------------------------------------------ #
    def render_fragment(self, name: str) -> str:
        """Rend un fragment statique de `fragments/` (aucune variable)."""
        template = self.env.get_template(f"fragments/{name}.html")
        logger.debug("Rendu du fragment statique '%s'", name)
        return template.render()
