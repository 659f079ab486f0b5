"""
Identity -- injectable id generation.

Blueprint and contract ids are opaque strings.  Production code draws them
from uuid4; tests use ``SequentialIdFactory`` so that ids are predictable.
Field ids are NOT generated here: the caller (editor or catalog) supplies
them.
"""

from abc import ABC, abstractmethod
from itertools import count
from uuid import uuid4


class IdFactory(ABC):
    """Source of fresh, globally unique ids."""

    @abstractmethod
    def new_id(self) -> str:
        ...


class UuidIdFactory(IdFactory):
    def new_id(self) -> str:
        return str(uuid4())


class SequentialIdFactory(IdFactory):
    """Deterministic ids: ``<prefix>-1``, ``<prefix>-2``, ..."""

    def __init__(self, prefix: str = "id"):
        self._prefix = prefix
        self._counter = count(1)

    def new_id(self) -> str:
        return f"{self._prefix}-{next(self._counter)}"
