from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Protocol


log = logging.getLogger("retranslate.notices")

SUCCESS = "success"
ERROR = "error"
INFO = "info"


@dataclass(frozen=True)
class Notice:
    kind: str
    message: str


class Notifier(Protocol):
    def notify(self, notice: Notice) -> None:
        ...


@dataclass
class NoticeLog:
    """Collects notices in emission order and optionally echoes each one."""

    echo: Callable[[Notice], None] | None = None
    notices: list[Notice] = field(default_factory=list)

    def notify(self, notice: Notice) -> None:
        self.notices.append(notice)
        log.debug("notice %s: %s", notice.kind, notice.message)
        if self.echo is not None:
            self.echo(notice)

    def of_kind(self, kind: str) -> list[Notice]:
        return [n for n in self.notices if n.kind == kind]
