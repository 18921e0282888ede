"""
Limiteur de debit pour l'API HTTP AniDB.

AniDB bannit les clients trop bavards. Le limiteur impose trois contraintes
calculees sur l'historique des requetes emises:
- un delai minimal entre deux requetes consecutives
- un espacement moyen minimal sur une fenetre glissante
- un plafond de requetes par fenetre

Une seule instance est partagee par tout le processus (un seul budget AniDB).

Usage:
    limiter = RateLimiter(min_delay=3, average_delay=5, window=300)
    await limiter.tick()
    response = await client.get(url)
"""

import asyncio
import time
from collections import deque
from typing import Awaitable, Callable, Optional

from loguru import logger

from animeta.core.exceptions import OperationCancelledError
from animeta.utils.constants import (
    RATE_LIMIT_AVERAGE_DELAY,
    RATE_LIMIT_MIN_DELAY,
    RATE_LIMIT_WINDOW,
)

Sleep = Callable[[float], Awaitable[None]]


def check_cancelled(cancellation: Optional[asyncio.Event]) -> None:
    """Leve OperationCancelledError si l'evenement d'annulation est positionne."""
    if cancellation is not None and cancellation.is_set():
        raise OperationCancelledError("Operation annulee")


async def cancellable_sleep(
    delay: float,
    cancellation: Optional[asyncio.Event] = None,
    sleep: Sleep = asyncio.sleep,
) -> None:
    """
    Attend delay secondes, ou moins si l'annulation est demandee.

    Args:
        delay: Duree d'attente en secondes
        cancellation: Evenement d'annulation optionnel
        sleep: Fonction d'attente (injectable pour les tests)

    Raises:
        OperationCancelledError: Si l'evenement est positionne pendant l'attente
    """
    check_cancelled(cancellation)
    if delay <= 0:
        return
    if cancellation is None:
        await sleep(delay)
        return
    try:
        await asyncio.wait_for(cancellation.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return
    raise OperationCancelledError("Operation annulee pendant l'attente du limiteur")


class RateLimiter:
    """
    Limiteur de debit a fenetre glissante.

    Les appels a tick() sont serialises par un verrou asyncio (liberation
    FIFO) : deux appelants concurrents ne sont jamais liberes sans avoir
    respecte le delai minimal l'un par rapport a l'autre.

    Attributes:
        min_delay: Delai minimal entre deux requetes (secondes)
        average_delay: Espacement moyen minimal sur la fenetre (secondes)
        window: Duree de la fenetre glissante (secondes)
        max_requests: Plafond de requetes par fenetre
    """

    def __init__(
        self,
        min_delay: float = RATE_LIMIT_MIN_DELAY,
        average_delay: float = RATE_LIMIT_AVERAGE_DELAY,
        window: float = RATE_LIMIT_WINDOW,
        max_requests: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """
        Initialise le limiteur.

        Args:
            min_delay: Delai minimal entre deux requetes
            average_delay: Espacement moyen cible sur la fenetre
            window: Fenetre glissante sur laquelle la moyenne est calculee
            max_requests: Plafond par fenetre (defaut: window / average_delay)
            clock: Horloge monotone (injectable pour les tests)
            sleep: Fonction d'attente (injectable pour les tests)
        """
        if max_requests is None:
            max_requests = max(1, int(window / average_delay)) if average_delay > 0 else 0
        self.min_delay = min_delay
        self.average_delay = average_delay
        self.window = window
        self.max_requests = max_requests
        self._clock = clock
        self._sleep = sleep
        self._history: deque[float] = deque()
        self._lock = asyncio.Lock()

    @property
    def history(self) -> tuple[float, ...]:
        """Horodatages des requetes encore dans la fenetre."""
        return tuple(self._history)

    def _prune(self, now: float) -> None:
        while self._history and now - self._history[0] >= self.window:
            self._history.popleft()

    def compute_delay(self, now: float) -> float:
        """
        Calcule l'attente necessaire avant d'emettre une requete a l'instant now.

        Returns:
            Delai en secondes (0 si la requete peut partir immediatement)
        """
        self._prune(now)
        if not self._history:
            return 0.0

        # Delai minimal depuis la derniere requete
        delay = self._history[-1] + self.min_delay - now

        # Espacement moyen: (now - plus_ancienne) / n >= average_delay
        count = len(self._history)
        delay = max(delay, self._history[0] + count * self.average_delay - now)

        # Plafond: attendre que la plus ancienne sorte de la fenetre
        if self.max_requests and count >= self.max_requests:
            delay = max(delay, self._history[0] + self.window - now)

        return max(0.0, delay)

    async def tick(self, cancellation: Optional[asyncio.Event] = None) -> None:
        """
        Suspend l'appelant jusqu'a ce qu'une requete puisse etre emise.

        L'horodatage est enregistre apres l'attente, au moment ou l'appelant
        est libere.

        Args:
            cancellation: Evenement d'annulation optionnel

        Raises:
            OperationCancelledError: Si l'annulation est demandee pendant l'attente
        """
        async with self._lock:
            check_cancelled(cancellation)
            delay = self.compute_delay(self._clock())
            if delay > 0:
                logger.debug("Limiteur AniDB: attente", delay=round(delay, 3))
                await cancellable_sleep(delay, cancellation, self._sleep)
            now = self._clock()
            self._prune(now)
            self._history.append(now)
