"""
Persistence port for the transaction store

The store only talks to an object with load() / save(); the JSON file
backend and the in-memory fake both implement it.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional, Protocol

from caixa.config.settings import STORAGE_KEY, STORAGE_PATH

logger = logging.getLogger(__name__)


class Storage(Protocol):
    def load(self) -> Optional[List[Dict[str, Any]]]:
        ...

    def save(self, records: List[Dict[str, Any]]) -> None:
        ...


class MemoryStorage:
    """Keeps the serialized list in memory. Used by tests."""

    def __init__(self, records: Optional[List[Dict[str, Any]]] = None):
        self.records = records
        self.saves = 0

    def load(self) -> Optional[List[Dict[str, Any]]]:
        if self.records is None:
            return None
        return [dict(r) for r in self.records]

    def save(self, records: List[Dict[str, Any]]) -> None:
        self.records = [dict(r) for r in records]
        self.saves += 1


class JsonFileStorage:
    """
    Stores the full transaction list as JSON under a fixed key.

    File layout:
        {"uli_transacoes_v4_improved": [{"data": "15/03/2024", "valor": -45.9, ...}]}
    """

    def __init__(self, path: str = STORAGE_PATH, key: str = STORAGE_KEY):
        self.path = path
        self.key = key

    def load(self) -> Optional[List[Dict[str, Any]]]:
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"[Erro] Error loading {self.path}: {e}")
            return None

        records = data.get(self.key) if isinstance(data, dict) else None
        if not isinstance(records, list):
            return None
        return records

    def save(self, records: List[Dict[str, Any]]) -> None:
        data = {}
        if os.path.exists(self.path):
            try:
                with open(self.path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (json.JSONDecodeError, OSError):
                data = {}
            if not isinstance(data, dict):
                data = {}

        data[self.key] = records
        # written next to the target, then swapped in; a failed dump leaves the old file
        tmp_path = f"{self.path}.tmp"
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=4, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"[Erro] Error saving {self.path}: {e}")
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
