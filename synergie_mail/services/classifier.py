"""
Détection des emails générés par des expéditeurs automatiques connus.

Table fermée de règles `{matcher, fragment}` : la première règle qui
correspond remplace le contenu nettoyé par un fragment HTML statique.
Ajouter un type d'expéditeur = ajouter une famille, une règle et un
fichier `templates/fragments/<nom>.html`.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from synergie_mail.services.sanitizer import FALLBACK_TEXT, apply_fallback

logger = logging.getLogger(__name__)

Matcher = Callable[[str, str], bool]


@dataclass(frozen=True)
class SenderFamily:
    """Expéditeur automatique : marqueurs sur le contenu brut + texte de repli."""
    name: str
    detector: Callable[[str], bool]
    fallback_text: str


@dataclass(frozen=True)
class ClassifierRule:
    name: str
    family: str
    matcher: Matcher
    fragment: str


@dataclass(frozen=True)
class Classification:
    rule: str
    family: str
    fragment: str


# ---------------------------------------------------------------------------
# Hostinger (notifications de création de messagerie)
# ---------------------------------------------------------------------------
_CSS_ONLY_RE = re.compile(r"^[\s*{}:;-]*$")


def is_hostinger_notification(raw: str) -> bool:
    return "Hostinger" in raw and (
        "business email" in raw or "Get started with business email" in raw
    )


def looks_technical(cleaned: str) -> bool:
    """Texte encore dominé par du CSS / trop court pour être affiché."""
    return (
        any(word in cleaned for word in ("margin", "padding", "border"))
        or len(cleaned) < 50
        or bool(_CSS_ONLY_RE.match(cleaned))
    )


def mentions_getting_started(cleaned: str) -> bool:
    return "Get started" in cleaned or "business email" in cleaned


HOSTINGER = SenderFamily(
    name="hostinger",
    detector=is_hostinger_notification,
    fallback_text="Email de configuration Hostinger reçu",
)

DEFAULT_FAMILIES: Sequence[SenderFamily] = (HOSTINGER,)

DEFAULT_RULES: Sequence[ClassifierRule] = (
    ClassifierRule(
        name="hostinger-setup",
        family="hostinger",
        matcher=lambda raw, cleaned: looks_technical(cleaned),
        fragment="hostinger_setup",
    ),
    ClassifierRule(
        name="hostinger-welcome",
        family="hostinger",
        matcher=lambda raw, cleaned: mentions_getting_started(cleaned),
        fragment="hostinger_welcome",
    ),
)


class ContentClassifier:
    """Applique la table de règles sur un message décodé."""

    def __init__(
        self,
        families: Sequence[SenderFamily] = DEFAULT_FAMILIES,
        rules: Sequence[ClassifierRule] = DEFAULT_RULES,
    ) -> None:
        self.families: Dict[str, SenderFamily] = {f.name: f for f in families}
        self.rules: List[ClassifierRule] = list(rules)

        unknown = {r.family for r in self.rules} - set(self.families)
        if unknown:
            raise ValueError(f"Règles rattachées à des familles inconnues : {sorted(unknown)}")

    def system_family(self, raw: str) -> Optional[str]:
        """Nom de la famille d'expéditeur automatique reconnue, sinon None."""
        for family in self.families.values():
            if family.detector(raw or ""):
                return family.name
        return None

    def fallback_text(self, raw: str) -> str:
        family = self.system_family(raw)
        if family is None:
            return FALLBACK_TEXT
        return self.families[family].fallback_text

    def classify(self, raw: str, cleaned: str) -> Optional[Classification]:
        """
        Retourne la première règle applicable au message, ou None.

        Args:
            raw: Corps décodé (avant nettoyage), porteur des marqueurs.
            cleaned: Texte issu du pipeline de nettoyage, avant fallback.
        """
        family = self.system_family(raw)
        if family is None:
            return None

        for rule in self.rules:
            if rule.family != family:
                continue
            if rule.matcher(raw, cleaned):
                logger.debug("Email système détecté (règle '%s')", rule.name)
                return Classification(rule=rule.name, family=family, fragment=rule.fragment)

        return None

    def display_text(self, raw: str, cleaned: str) -> str:
        """Texte affichable : nettoyé, ou texte de repli de la famille."""
        return apply_fallback(cleaned, self.fallback_text(raw))
