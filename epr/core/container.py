"""Simple dependency container for wiring core services."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache

from epr.core.config import Settings, get_settings
from epr.domain.verifications import VerificationService
from epr.infrastructure.database.session import get_engine, get_session_factory


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings
    verification_service: VerificationService = field(init=False)

    def init_infrastructure(self) -> None:
        """Ensure infrastructure singletons (database engine, etc.) are initialised."""
        get_engine()
        # one service per process so the recorder's retry queue is shared
        self.verification_service = VerificationService.from_factory(get_session_factory(), self.settings)


@lru_cache()
def get_container() -> ApplicationContainer:
    container = ApplicationContainer(settings=get_settings())
    container.init_infrastructure()
    return container


__all__ = ["ApplicationContainer", "get_container"]
