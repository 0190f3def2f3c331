from __future__ import annotations

from contextlib import contextmanager
from typing import ContextManager, Iterator, Protocol

from .connection import DatabaseConnection
from .mysql_base import db_transaction


class TransactionManager(Protocol):
    def atomic(self) -> ContextManager[None]:
        """Everything inside commits together or not at all."""

        raise NotImplementedError


class MySQLTransactionManager(TransactionManager):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with db_transaction(self._conn_factory):
            yield
