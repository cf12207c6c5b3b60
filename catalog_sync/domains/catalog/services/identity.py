"""
Correlation between source identities and destination records.

The destination schema has no column for the source identity, so it lives in
each record's ``metadata`` bag. Reconciliation only talks to the
``IdentityCorrelation`` interface so a schema-level key can replace it.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Optional

from catalog_sync.core.config.settings import settings


class IdentityCorrelation(ABC):
    @abstractmethod
    def filters_for(self, external_ids: Iterable[str]) -> Dict[str, Any]:
        """Destination query filters matching any of ``external_ids``"""
        pass

    @abstractmethod
    def stamp(self, payload: Dict[str, Any], external_id: Optional[str]) -> Dict[str, Any]:
        """Return ``payload`` carrying ``external_id``"""
        pass

    @abstractmethod
    def external_id_of(self, record: Dict[str, Any]) -> Optional[str]:
        pass

    def index(self, records: Iterable[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        """external id -> record; the first record wins for a repeated id"""
        indexed: Dict[str, Dict[str, Any]] = {}
        for record in records:
            external_id = self.external_id_of(record)
            if external_id and external_id not in indexed:
                indexed[external_id] = record
        return indexed


class MetadataIdentityCorrelation(IdentityCorrelation):
    def __init__(self, key: Optional[str] = None):
        self.key = key or settings.destination.DESTINATION_EXTERNAL_ID_KEY

    def filters_for(self, external_ids: Iterable[str]) -> Dict[str, Any]:
        return {"metadata": {self.key: list(dict.fromkeys(external_ids))}}

    def stamp(self, payload: Dict[str, Any], external_id: Optional[str]) -> Dict[str, Any]:
        if external_id is None:
            return payload
        metadata = dict(payload.get("metadata") or {})
        metadata[self.key] = external_id
        return {**payload, "metadata": metadata}

    def external_id_of(self, record: Dict[str, Any]) -> Optional[str]:
        value = (record.get("metadata") or {}).get(self.key)
        return None if value is None else str(value)
