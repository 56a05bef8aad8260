"""Most-recently-used list of looked-up addresses, kept in a small JSON file."""

import json
import logging
import os
from typing import List

import config

logger = logging.getLogger(__name__)


class RecentLookups:
    def __init__(self, path: str = config.RECENT_PATH, capacity: int = config.MAX_RECENT):
        self.path = path
        self.capacity = capacity

    def load(self) -> List[str]:
        """Newest first. A missing or unreadable file reads as empty."""
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable recent lookups file %s: %s", self.path, e)
            return []
        if not isinstance(data, list):
            return []
        return [a for a in data if isinstance(a, str)][:self.capacity]

    def add(self, address: str) -> List[str]:
        """Move ``address`` to the front, evicting the least recent past capacity."""
        recent = [a for a in self.load() if a != address]
        recent.insert(0, address)
        del recent[self.capacity:]
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            with open(self.path, "w") as f:
                json.dump(recent, f)
        except OSError as e:
            logger.warning("Could not save recent lookups to %s: %s", self.path, e)
        return recent

    def clear(self):
        if os.path.exists(self.path):
            os.remove(self.path)
