"""
Gestion des templates d'emails commerciaux et substitution des variables.

Les placeholders sont de la forme `{{nom}}`. La substitution est un simple
remplacement littéral global : aucune logique, aucun échappement, et les
placeholders sans valeur restent tels quels dans le résultat.
"""

import json
import logging
import re
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from synergie_mail.models import TEMPLATE_CATEGORIES, EmailTemplate, ProcessedTemplate
from synergie_mail.services.default_templates import DEFAULT_TEMPLATES

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"\{\{([A-Za-z0-9_]+)\}\}")


class TemplateValidationError(ValueError):
    """Template invalide (champ manquant, catégorie inconnue, placeholder non déclaré)."""


def find_placeholders(text: str) -> List[str]:
    """Noms des placeholders `{{nom}}` présents dans le texte, sans doublon."""
    seen: List[str] = []
    for name in _PLACEHOLDER_RE.findall(text or ""):
        if name not in seen:
            seen.append(name)
    return seen


def substitute(text: str, variables: Mapping[str, Any]) -> str:
    """Remplace chaque occurrence de `{{clé}}` par `str(valeur)`."""
    for key, value in variables.items():
        text = text.replace("{{" + key + "}}", str(value))
    return text


class TemplateService:
    """
    Registre des templates d'emails.

    Livré avec les templates par défaut ; d'autres peuvent être chargés
    depuis un fichier JSON (EMAIL_TEMPLATES_PATH) ou enregistrés à chaud.
    """

    def __init__(
        self,
        templates: Iterable[EmailTemplate] = DEFAULT_TEMPLATES,
        extra_path: Optional[Path] = None,
    ) -> None:
        self._templates: Dict[str, EmailTemplate] = {}
        for template in templates:
            self.register_template(replace(template))

        if extra_path is not None:
            self.load_from_file(extra_path)

    # ------------------------------------------------------------------ #
    # Validation / enregistrement
    # ------------------------------------------------------------------ #
    @staticmethod
    def undeclared_placeholders(template: EmailTemplate) -> List[str]:
        """Placeholders utilisés dans subject/html/text mais absents de `variables`."""
        used: List[str] = []
        for text in (template.subject, template.html_content, template.text_content):
            for name in find_placeholders(text):
                if name not in used:
                    used.append(name)
        declared = set(template.variables)
        return [name for name in used if name not in declared]

    def register_template(self, template: EmailTemplate) -> EmailTemplate:
        """
        Ajoute (ou remplace) un template après validation.

        Raises:
            TemplateValidationError: catégorie inconnue ou placeholder non déclaré.
        """
        if not template.id:
            raise TemplateValidationError("Template sans identifiant")
        if template.category not in TEMPLATE_CATEGORIES:
            raise TemplateValidationError(
                f"Catégorie inconnue pour '{template.id}' : {template.category}"
            )

        undeclared = self.undeclared_placeholders(template)
        if undeclared:
            raise TemplateValidationError(
                f"Variables non déclarées dans '{template.id}' : {', '.join(undeclared)}"
            )

        if not template.created_at:
            template.created_at = datetime.now(timezone.utc).isoformat()

        if template.id in self._templates:
            logger.info("♻️ Template '%s' remplacé", template.id)
        self._templates[template.id] = template
        return template

    def load_from_file(self, path: Path) -> int:
        """
        Charge des templates supplémentaires depuis un fichier JSON
        (liste d'objets au format camelCase de l'API).

        Les entrées invalides sont journalisées puis ignorées.

        Returns:
            int: Nombre de templates chargés.
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.warning("⚠️ Fichier de templates introuvable : %s", path)
            return 0
        except (OSError, json.JSONDecodeError) as e:
            logger.error("❌ Lecture du fichier de templates %s impossible : %s", path, e)
            return 0

        if not isinstance(data, list):
            logger.error("❌ %s doit contenir une liste de templates", path)
            return 0

        loaded = 0
        for index, entry in enumerate(data):
            try:
                self.register_template(_template_from_dict(entry))
                loaded += 1
            except (TemplateValidationError, KeyError, TypeError) as e:
                logger.warning("⚠️ Template #%s ignoré (%s) : %s", index, path.name, e)

        logger.info("📄 %d template(s) chargé(s) depuis %s", loaded, path)
        return loaded

    # ------------------------------------------------------------------ #
    # Lecture
    # ------------------------------------------------------------------ #
    def get_all_templates(self, category: Optional[str] = None) -> List[EmailTemplate]:
        """Templates actifs, éventuellement filtrés par catégorie."""
        return [
            t for t in self._templates.values()
            if t.is_active and (not category or t.category == category)
        ]

    def get_template(self, template_id: str) -> Optional[EmailTemplate]:
        return self._templates.get(template_id)

    @staticmethod
    def get_template_categories() -> List[str]:
        return list(TEMPLATE_CATEGORIES)

    # ------------------------------------------------------------------ #
    # Substitution
    # ------------------------------------------------------------------ #
    def process_template(
        self,
        template_id: str,
        variables: Optional[Mapping[str, Any]] = None,
    ) -> Optional[ProcessedTemplate]:
        """
        Applique les variables au template.

        Returns:
            ProcessedTemplate, ou None si le template est inconnu ou inactif.
        """
        template = self.get_template(template_id)
        if template is None or not template.is_active:
            logger.debug("Template '%s' introuvable ou inactif", template_id)
            return None

        variables = variables or {}
        return ProcessedTemplate(
            subject=substitute(template.subject, variables),
            html_content=substitute(template.html_content, variables),
            text_content=substitute(template.text_content, variables),
        )


def _template_from_dict(entry: Dict[str, Any]) -> EmailTemplate:
    if not isinstance(entry, dict):
        raise TypeError("entrée non objet")
    return EmailTemplate(
        id=entry["id"],
        name=entry["name"],
        category=entry["category"],
        subject=entry["subject"],
        html_content=entry.get("htmlContent", ""),
        text_content=entry.get("textContent", ""),
        variables=list(entry.get("variables", [])),
        description=entry.get("description", ""),
        is_active=bool(entry.get("isActive", True)),
        created_at=entry.get("createdAt", ""),
    )
