"""
Utilitaires partages pour les commandes CLI d'AniMeta.

Ce module fournit :
- console : instance Rich Console partagee
- suppress_loguru : context manager pour desactiver/reactiver les logs loguru
- with_container : decorateur injectant un container (client AniDB ferme en sortie)
"""

from contextlib import contextmanager
from functools import wraps

from loguru import logger as loguru_logger
from rich.console import Console

from animeta.container import Container

console = Console()


@contextmanager
def suppress_loguru():
    """
    Context manager pour desactiver les logs loguru pendant l'affichage Rich.

    Usage:
        with suppress_loguru():
            console.print(...)
    """
    loguru_logger.disable("animeta")
    try:
        yield
    finally:
        loguru_logger.enable("animeta")


def with_container():
    """
    Decorateur qui injecte un container en premier argument.

    Le client HTTP AniDB est ferme a la fin de la commande.

    Usage:
        @with_container()
        async def my_command(container, ...):
            resolver = container.resolver()
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            container = Container()
            try:
                return await func(container, *args, **kwargs)
            finally:
                await container.anidb_client().close()
        return wrapper
    return decorator

