"""
File storage adapter for AuditChain

This module keeps the chain state in a small JSON document. Writes go to a
temporary file in the same directory which is flushed, synced and then renamed
over the previous document, so a crash leaves either the old or the new state.
"""

import json
import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from auditchain.adapters.storage.base import ChainStateStore
from auditchain.core.exceptions import StateLoadError, StateSaveError

logger = logging.getLogger(__name__)


class FileStateStore(ChainStateStore):
    """JSON file chain state store"""

    def __init__(self, state_file: str = "data/chain_state.json"):
        """
        Initialize file state store

        Args:
            state_file: Path of the JSON state document
        """
        self.state_file = Path(state_file)
        if ".." in self.state_file.parts:
            raise ValueError(f"Security: Invalid state file path '{state_file}'. Path traversal detected.")

        self.state_file.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"File state store initialized at: {self.state_file}")

    def get(self) -> Optional[dict[str, str]]:
        if not self.state_file.exists():
            return None

        try:
            with open(self.state_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read chain state {self.state_file}: {e}")
            raise StateLoadError(f"Cannot read chain state from {self.state_file}: {e}") from e

        if not isinstance(data, dict):
            raise StateLoadError(f"Chain state in {self.state_file} is not a JSON object")
        return {str(k): str(v) for k, v in data.items()}

    def set(self, mapping: Mapping[str, str]) -> None:
        tmp_path = self.state_file.with_name(self.state_file.name + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(dict(mapping), f, indent=2, sort_keys=True)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.state_file)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            logger.error(f"Failed to write chain state {self.state_file}: {e}")
            raise StateSaveError(f"Cannot write chain state to {self.state_file}: {e}") from e

        logger.debug(f"Stored chain state in {self.state_file}")
