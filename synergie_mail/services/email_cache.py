"""
Cache mémoire de la boîte de réception.

Une seule liste d'EmailRecord et l'horodatage de la dernière synchro,
protégés par un verrou : deux lecteurs qui trouvent le cache périmé ne
déclenchent qu'une seule synchro, et personne n'observe de liste vide
pendant un rechargement.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from synergie_mail.models import STATUS_OK, EmailRecord, FetchResult

logger = logging.getLogger(__name__)

Loader = Callable[[], FetchResult]


@dataclass(frozen=True)
class CacheSnapshot:
    emails: List[EmailRecord]
    last_fetch: Optional[float]
    fresh: bool


class EmailCache:
    def __init__(self, duration: float = 30.0, clock: Callable[[], float] = time.time) -> None:
        """
        Args:
            duration: Durée de validité du cache, en secondes.
            clock: Horloge (secondes) ; injectable pour les tests.
        """
        self.duration = duration
        self._clock = clock
        self._lock = threading.Lock()
        self._emails: List[EmailRecord] = []
        # None = cache froid (jamais chargé ou invalidé)
        self._last_fetch: Optional[float] = None

    # ------------------------------------------------------------------ #
    # État
    # ------------------------------------------------------------------ #
    def _is_fresh(self) -> bool:
        if self._last_fetch is None:
            return False
        return self._clock() - self._last_fetch < self.duration

    @property
    def last_fetch(self) -> Optional[float]:
        return self._last_fetch

    def snapshot(self) -> CacheSnapshot:
        with self._lock:
            return CacheSnapshot(
                emails=list(self._emails),
                last_fetch=self._last_fetch,
                fresh=self._is_fresh(),
            )

    # ------------------------------------------------------------------ #
    # Lecture / écriture
    # ------------------------------------------------------------------ #
    def get(self, loader: Loader) -> FetchResult:
        """
        Retourne le contenu du cache s'il est frais, sinon appelle `loader`.

        Seuls les résultats `ok` sont mis en cache : un résultat dégradé est
        renvoyé tel quel et la lecture suivante retente la synchro.
        """
        with self._lock:
            if self._is_fresh():
                logger.debug("Cache emails frais (%d email(s))", len(self._emails))
                return FetchResult(
                    status=STATUS_OK, emails=self._emails, fetched_at=self._last_fetch
                )
            return self._load(loader)

    def refresh(self, loader: Loader) -> FetchResult:
        """Invalide puis recharge immédiatement."""
        with self._lock:
            self._clear()
            return self._load(loader)

    def invalidate(self) -> None:
        with self._lock:
            self._clear()
        logger.debug("🗑️ Cache emails invalidé")

    def _clear(self) -> None:
        self._emails = []
        self._last_fetch = None

    def _load(self, loader: Loader) -> FetchResult:
        result = loader()
        if result.ok:
            self._emails = list(result.emails)
            self._last_fetch = self._clock()
            result.fetched_at = self._last_fetch
            result.emails = self._emails
            logger.debug("Cache emails rechargé (%d email(s))", len(self._emails))
        return result
