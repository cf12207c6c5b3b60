"""
Durable object storage interface
"""

from abc import ABC, abstractmethod
from typing import BinaryIO, Dict, Optional


class IObjectStorage(ABC):
    @abstractmethod
    async def exists(self, key: str) -> bool:
        pass

    @abstractmethod
    async def upload(
        self,
        key: str,
        body: BinaryIO,
        content_type: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> None:
        """Stream ``body`` to ``key`` with a content type and provenance metadata"""
        pass

    @abstractmethod
    def public_url(self, key: str) -> str:
        """Deterministic public URL of ``key``"""
        pass
