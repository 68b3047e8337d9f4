"""Language client strategies that attach an edit buffer to a language server"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Protocol


logger = logging.getLogger(__name__)


class LspStrategy(str, Enum):
    eglot = "eglot"
    lsp_mode = "lsp-mode"


class LanguageClient(Protocol):
    attached: set[Path]

    def attach(self, path: Path) -> bool:
        """Associate path with a language server session; True if newly attached."""
        ...


class _Client:
    """Shared bookkeeping: one registration per key, start hook called once per key."""
    strategy: LspStrategy

    def __init__(self, start: Optional[Callable[[Path], None]] = None):
        self._start = start
        self._sessions: dict[Path, set[Path]] = {}
        self.attached: set[Path] = set()

    def _key(self, path: Path) -> Path:
        raise NotImplementedError

    def attach(self, path: Path) -> bool:
        path = Path(os.path.abspath(path))
        key = self._key(path)
        new_session = key not in self._sessions
        if new_session:
            logger.info("%s: starting session for %s", self.strategy.value, key)
            if self._start:
                self._start(path)
            self._sessions[key] = set()
        fresh = path not in self._sessions[key]
        self._sessions[key].add(path)
        self.attached.add(path)
        if fresh:
            logger.info("%s: attached %s", self.strategy.value, path)
        return fresh

    def sessions(self) -> list[Path]:
        return sorted(self._sessions)


class EglotLikeClient(_Client):
    """One server per project directory; further files join the running server."""
    strategy = LspStrategy.eglot

    def _key(self, path: Path) -> Path:
        return path.parent


class LspModeLikeClient(_Client):
    """One workspace registration per file."""
    strategy = LspStrategy.lsp_mode

    def _key(self, path: Path) -> Path:
        return path


def make_client(
    strategy: LspStrategy,
    start: Optional[Callable[[Path], None]] = None,
    ) -> LanguageClient:
    """Build the language client for strategy; unknown names raise ValueError."""
    clients = {LspStrategy.eglot: EglotLikeClient, LspStrategy.lsp_mode: LspModeLikeClient}
    return clients[LspStrategy(strategy)](start)
