from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

import requests

from rdl.config import ApiSettings
from rdl.repositories.http_repo import HttpDebtRepository
from rdl.services.export_service import ExportService
from rdl.services.ledger_service import LedgerService


@dataclass(frozen=True)
class AppContainer:
    settings: ApiSettings
    repo: HttpDebtRepository
    export: ExportService
    clock: Callable[[], datetime] | None = None

    def open_ledger(self, debt_id: str) -> LedgerService:
        ledger = LedgerService(
            self.repo,
            clock=self.clock,
            tz=self.settings.tzinfo,
            currency_places=self.settings.currency_places,
        )
        ledger.open(debt_id)
        return ledger


def build_container(
    settings: ApiSettings,
    session: requests.Session | None = None,
    clock: Callable[[], datetime] | None = None,
) -> AppContainer:
    repo = HttpDebtRepository(settings, session=session)
    export = ExportService()

    return AppContainer(
        settings=settings,
        repo=repo,
        export=export,
        clock=clock,
    )
