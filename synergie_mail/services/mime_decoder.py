"""
Décodage MIME : quoted-printable, en-têtes encodés (RFC 2047) et parties
feuilles d'un message.

Aucune fonction de ce module ne lève d'exception sur une entrée malformée :
le texte d'origine est conservé tel quel là où le décodage échoue.
"""

import logging
import re
from email.header import decode_header, make_header
from email.message import Message
from typing import Any

logger = logging.getLogger(__name__)

_SOFT_LINE_BREAK_RE = re.compile(r"=\r?\n")
# Suite d'échappements =XX consécutifs (hex majuscule, comme produit par les MUA)
_HEX_RUN_RE = re.compile(r"(?:=[0-9A-F]{2})+")

# Lettres accentuées françaises courantes, appliquées avant le décodeur
# générique. Les paires UTF-8 d'abord, puis les octets Latin-1 isolés.
ACCENT_TABLE = (
    ("=C3=A9", "é"),
    ("=C3=A8", "è"),
    ("=C3=A7", "ç"),
    ("=C3=A0", "à"),
    ("=C3=B4", "ô"),
    ("=C3=AA", "ê"),
    ("=C2=A0", " "),
)
LATIN1_TABLE = {
    "E9": "é",
    "E8": "è",
    "E7": "ç",
    "E0": "à",
    "F4": "ô",
    "EA": "ê",
}
# Octet Latin-1 isolé : ni précédé ni suivi d'un autre =XX (sinon c'est
# un morceau de séquence multi-octets, laissé au décodeur générique)
_LATIN1_RE = re.compile(
    r"(?<!=[0-9A-F]{2})=(%s)(?!=[0-9A-F]{2})" % "|".join(LATIN1_TABLE)
)


def _decode_hex_run(run: str, charset: str) -> str:
    raw = bytes(int(run[i + 1:i + 3], 16) for i in range(0, len(run), 3))
    try:
        return raw.decode(charset)
    except (UnicodeDecodeError, LookupError):
        return raw.decode("latin-1")


def decode_quoted_printable(raw: str, charset: str = "utf-8") -> str:
    """
    Décode une chaîne quoted-printable en texte Unicode.

    - supprime les sauts de ligne "soft" (`=` en fin de ligne) ;
    - applique la table d'accents puis le décodeur hexadécimal générique ;
    - laisse intacts les échappements malformés (`=G1`, `=4` final).

    Args:
        raw: Contenu brut (corps ou fragment d'en-tête).
        charset: Charset des octets décodés (fallback Latin-1 si invalide).
    """
    if not raw:
        return ""

    text = _SOFT_LINE_BREAK_RE.sub("", raw)
    for escaped, char in ACCENT_TABLE:
        text = text.replace(escaped, char)
    text = _LATIN1_RE.sub(lambda m: LATIN1_TABLE[m.group(1)], text)

    return _HEX_RUN_RE.sub(lambda m: _decode_hex_run(m.group(0), charset), text)


def decode_email_header(header_value: Any) -> str:
    """
    Decode email header value handling various encodings.

    Args:
        header_value: Raw email header value (string or None or header object)

    Returns:
        str: Decoded header string, or the raw text if it cannot be decoded.
    """
    if not header_value:
        return ""
    try:
        return str(make_header(decode_header(str(header_value)))).strip()
    except (UnicodeDecodeError, LookupError, ValueError) as e:
        logger.debug("En-tête non décodable (%s), conservé brut : %r", e, header_value)
        return str(header_value).strip()


def decode_part(part: Message) -> str:
    """
    Décode une partie feuille d'un message en texte.

    Les parties quoted-printable passent par `decode_quoted_printable` sur
    le payload brut ; les autres par le décodage de transfert standard
    (base64, 7bit, 8bit) puis le charset déclaré.
    """
    charset = part.get_content_charset() or "utf-8"
    cte = (part.get("Content-Transfer-Encoding") or "").strip().lower()

    if cte == "quoted-printable":
        raw = part.get_payload(decode=False)
        if isinstance(raw, str):
            return decode_quoted_printable(raw, charset)

    payload = part.get_payload(decode=True)
    if payload is None:
        return ""

    for enc in (charset, "utf-8", "latin-1"):
        try:
            return payload.decode(enc)
        except (UnicodeDecodeError, LookupError):
            logger.debug("Charset '%s' inutilisable, essai suivant", enc)

    return payload.decode("utf-8", errors="replace")
