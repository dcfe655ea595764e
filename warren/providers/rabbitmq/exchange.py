"""
Provider de exchanges.

La existencia se consulta con rabbitmqctl list_exchanges; la creación y el
borrado usan rabbitmqadmin. type, durable, auto_delete, internal y arguments
solo se aplican al crear: si difieren se informa, nunca se modifica.
"""

import json
from typing import Dict, List, Optional
from rich.console import Console

from warren.core.infra.base import BaseProvider
from warren.core.project.models import ExchangeDeclaration
from warren.core.runtime.cache import ListingCache, default_cache
from warren.core.runtime.state import StateDiff
from warren.providers.rabbitmq.parser import find_record
from warren.providers.rabbitmq.rabbitmqctl import Rabbitmqctl


EXCHANGE_FIELDS = ("type", "internal", "durable", "auto_delete")


class ExchangeProvider(BaseProvider):
    """Reconcilia la existencia de un exchange en un vhost"""

    kind = "exchange"
    listing = "exchanges"

    def __init__(
        self,
        declaration: ExchangeDeclaration,
        ctl: Rabbitmqctl,
        cache: Optional[ListingCache] = None,
        console: Optional[Console] = None
    ):
        super().__init__(declaration, console)
        self.ctl = ctl
        self.cache = cache if cache is not None else default_cache
        self._record: Optional[Dict[str, str]] = None
        self._resolved = False

    @property
    def exchange(self) -> str:
        return self.declaration.exchange

    @property
    def vhost(self) -> str:
        return self.declaration.vhost

    def _listing(self) -> List[str]:
        return self.cache.lines(
            self.kind,
            self.vhost,
            lambda: self.ctl.rabbitmqctl_list(self.listing, "-p", self.vhost, "name", *EXCHANGE_FIELDS),
        )

    def exists(self) -> Optional[Dict[str, str]]:
        if not self._resolved:
            parsed = find_record(self._listing(), self.exchange, EXCHANGE_FIELDS, self.listing)
            self._record = dict(parsed.values) if parsed else None
            self._resolved = True
        return self._record

    def _credentials(self) -> List[str]:
        return [
            f"--vhost={self.vhost}",
            f"--user={self.declaration.user}",
            f"--password={self.declaration.password}",
        ]

    def create(self) -> None:
        d = self.declaration
        self.ctl.rabbitmqadmin(
            "declare", "exchange", *self._credentials(),
            f"name={self.exchange}",
            f"type={d.type}",
            f"internal={d.internal}",
            f"durable={d.durable}",
            f"auto_delete={d.auto_delete}",
            f"arguments={json.dumps(d.arguments, sort_keys=True)}",
        )
        self._record = {"type": d.type, "internal": d.internal, "durable": d.durable, "auto_delete": d.auto_delete}
        self._resolved = True
        self._report(f"[green]✔[/green] Exchange creado: [cyan]{self.declaration.name}[/cyan]")

    def destroy(self) -> None:
        self.ctl.rabbitmqadmin(
            "delete", "exchange", *self._credentials(),
            f"name={self.exchange}",
        )
        self._record = None
        self._resolved = True
        self._report(f"[green]✔[/green] Exchange eliminado: [cyan]{self.declaration.name}[/cyan]")

    def drift(self) -> List[StateDiff]:
        diffs = self.ensure_diff()
        if diffs or not self.should_exist:
            return diffs
        record = self.exists()
        desired = self.declaration.desired_attributes()
        for field in EXCHANGE_FIELDS:
            if field in desired and record.get(field) != desired[field]:
                diffs.append(StateDiff(self.ref, field, desired[field], record.get(field), "info"))
        return diffs
