from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Guru


class GuruRepository(Protocol):
    def list_all(self) -> Sequence[Guru]:
        raise NotImplementedError

    def get_by_id(self, guru_id: int) -> Optional[Guru]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Guru]:
        raise NotImplementedError

    def create(self, data: dict) -> int:
        raise NotImplementedError

    def update(self, guru_id: int, data: dict) -> bool:
        raise NotImplementedError

    def delete(self, guru_id: int) -> bool:
        raise NotImplementedError
