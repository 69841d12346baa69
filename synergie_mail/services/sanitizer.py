"""
Nettoyage du contenu des emails pour l'affichage mobile.

Le traitement est un pipeline de fonctions pures, appliquées dans l'ordre :

    strip_mime_artifacts -> strip_blocks -> strip_inline_styles
    -> block_tags_to_newlines -> strip_tags -> decode_entities
    -> remove_control_chars -> collapse_whitespace -> apply_fallback

`extract_images` travaille sur le contenu brut, avant toute suppression
de balises. La mise en page HTML finale est faite par EmailRenderer.
"""

import html
import logging
import re
from dataclasses import dataclass, field
from typing import List

logger = logging.getLogger(__name__)

FALLBACK_TEXT = "Email reçu - Contenu disponible"
MIN_CONTENT_LENGTH = 10
SUMMARY_LENGTH = 300

# ---------------------------------------------------------------------------
# Regex pré-compilées
# ---------------------------------------------------------------------------
_MIME_HEADER_RE = re.compile(
    r"^(?:Content-Type|Content-Transfer-Encoding|Content-Disposition|MIME-Version"
    r"|X-[\w-]+|Message-ID|Date|From|To|Subject|Return-Path|Received"
    r"|Authentication-Results|DKIM-Signature|ARC-[\w-]+)"
    r":[^\r\n]*(?:\r?\n[ \t]+[^\r\n]*)*\r?\n?",
    re.IGNORECASE | re.MULTILINE,
)
_MIME_PARAM_RE = re.compile(r"^[ \t]*(?:boundary|charset)=[^\r\n]*\r?\n?", re.I | re.M)
_BOUNDARY_RE = re.compile(r"^--[0-9A-Za-z_=.]{20,}(?:--)?[ \t]*\r?$", re.MULTILINE)

_BLOCK_RE = re.compile(r"<(style|head|script)\b[^>]*>.*?</\1\s*>", re.I | re.S)
_VOID_TAG_RE = re.compile(r"<(?:link|meta)\b[^>]*>", re.I)
_INLINE_STYLE_RE = re.compile(r"""\s*\bstyle\s*=\s*(?:"[^"]*"|'[^']*')""", re.I)

_IMG_SRC_RE = re.compile(r"""<img\b[^>]*?\bsrc\s*=\s*["']([^"']+)["']""", re.I)
_BG_IMAGE_RE = re.compile(
    r"""background-image\s*:\s*url\(\s*["']?([^"')]+?)["']?\s*\)""", re.I
)
_IMAGE_PREFIXES = ("http://", "https://", "data:image/")

_HTML_HINT_RE = re.compile(r"<(?:html|body|div|p|br|table|span|img|a|td|h[1-6])\b", re.I)
_ANY_WS_RE = re.compile(r"\s+")

# Appliquées dans cet ordre, avant strip_tags
_BLOCK_TAG_RULES = (
    (re.compile(r"<br\s*/?>", re.I), "\n"),
    (re.compile(r"</p\s*>", re.I), "\n"),
    (re.compile(r"</div\s*>", re.I), "\n"),
    (re.compile(r"</tr\s*>", re.I), "\n"),
    (re.compile(r"</?h[1-6]\b[^>]*>", re.I), "\n"),
    (re.compile(r"</td\s*>", re.I), " "),
    (re.compile(r"</?a\b[^>]*>", re.I), ""),
)
_TAG_RE = re.compile(r"<[^>]+>")

# Caractères de contrôle C0/C1 sauf \t et \n, plus pipes / traits de tableau
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")
_BOX_DRAWING_RE = re.compile(r"[|│┃┆┇]")

_INLINE_WS_RE = re.compile(r"[ \t\u00a0]+")
_BARE_HEX_RE = re.compile(r"[0-9a-fA-F]{20,}")


@dataclass
class SanitizedContent:
    """Résultat du pipeline : texte affichable, texte avant fallback, images."""
    text: str
    cleaned_text: str
    images: List[str] = field(default_factory=list)

    @property
    def used_fallback(self) -> bool:
        return self.text != self.cleaned_text


# ---------------------------------------------------------------------------
# Étapes du pipeline
# ---------------------------------------------------------------------------
def strip_mime_artifacts(text: str) -> str:
    """Retire les en-têtes MIME techniques et les lignes de boundary."""
    text = _MIME_HEADER_RE.sub("", text)
    text = _MIME_PARAM_RE.sub("", text)
    return _BOUNDARY_RE.sub("", text)


def strip_blocks(text: str) -> str:
    """Supprime les blocs <style>, <head>, <script> et les balises <link>/<meta>."""
    text = _BLOCK_RE.sub("", text)
    return _VOID_TAG_RE.sub("", text)


def strip_inline_styles(text: str) -> str:
    return _INLINE_STYLE_RE.sub("", text)


def extract_images(raw: str) -> List[str]:
    """
    Extrait les sources d'images (<img src> et CSS background-image).

    Ne garde que les URLs http(s) et les data URI d'image, sans doublon,
    dans l'ordre d'apparition.
    """
    if not raw:
        return []

    found = [(m.start(), m.group(1)) for m in _IMG_SRC_RE.finditer(raw)]
    found += [(m.start(), m.group(1)) for m in _BG_IMAGE_RE.finditer(raw)]
    found.sort(key=lambda item: item[0])

    images: List[str] = []
    seen = set()
    for _, src in found:
        src = html.unescape(src.strip())
        if not src.startswith(_IMAGE_PREFIXES) or src in seen:
            continue
        seen.add(src)
        images.append(src)
    return images


def block_tags_to_newlines(text: str) -> str:
    for pattern, replacement in _BLOCK_TAG_RULES:
        text = pattern.sub(replacement, text)
    return text


def strip_tags(text: str) -> str:
    return _TAG_RE.sub("", text)


def decode_entities(text: str) -> str:
    return html.unescape(text)


def remove_control_chars(text: str) -> str:
    text = _CONTROL_RE.sub("", text)
    return _BOX_DRAWING_RE.sub("", text)


def collapse_whitespace(text: str) -> str:
    """Un seul espace par séquence, lignes rognées, au plus une ligne vide."""
    lines: List[str] = []
    for line in text.split("\n"):
        line = _INLINE_WS_RE.sub(" ", line).strip()
        if not line and (not lines or not lines[-1]):
            continue
        lines.append(line)
    return "\n".join(lines).strip()


def looks_like_bare_hex(text: str) -> bool:
    """Artefact de boundary MIME : longue chaîne hexadécimale seule."""
    return bool(_BARE_HEX_RE.fullmatch(text.strip()))


def apply_fallback(text: str, fallback: str = FALLBACK_TEXT) -> str:
    """Remplace un contenu vide, trop court ou purement hexadécimal."""
    stripped = (text or "").strip()
    if len(stripped) < MIN_CONTENT_LENGTH or looks_like_bare_hex(stripped):
        return fallback
    return text


# ---------------------------------------------------------------------------
# Assemblage
# ---------------------------------------------------------------------------
def looks_like_html(text: str) -> bool:
    return bool(_HTML_HINT_RE.search(text or ""))


def clean_text(raw: str) -> str:
    """Étapes de nettoyage (sans fallback) : contenu brut -> texte lisible."""
    if not raw:
        return ""

    text = raw.replace("\r\n", "\n").replace("\r", "\n")
    text = strip_mime_artifacts(text)
    text = strip_blocks(text)
    text = strip_inline_styles(text)

    if looks_like_html(text):
        # En HTML, les retours à la ligne du source ne sont pas significatifs
        text = _ANY_WS_RE.sub(" ", text)

    text = block_tags_to_newlines(text)
    text = strip_tags(text)
    text = decode_entities(text)
    text = remove_control_chars(text)
    return collapse_whitespace(text)


def html_to_text(raw: str, fallback: str = FALLBACK_TEXT) -> str:
    return apply_fallback(clean_text(raw), fallback)


def sanitize(raw: str, fallback: str = FALLBACK_TEXT) -> SanitizedContent:
    """Pipeline complet : texte nettoyé (avec fallback) + images extraites."""
    images = extract_images(raw or "")
    cleaned = clean_text(raw or "")
    result = SanitizedContent(
        text=apply_fallback(cleaned, fallback), cleaned_text=cleaned, images=images
    )

    logger.debug(
        "Nettoyage contenu: %s -> %s chars, %d image(s)%s",
        len(raw or ""),
        len(result.text),
        len(images),
        " (fallback)" if result.used_fallback else "",
    )
    return result


def summarize(text: str, limit: int = SUMMARY_LENGTH) -> str:
    """Résumé court pour textContent (le HTML complet n'est jamais tronqué)."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
