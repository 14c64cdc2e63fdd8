import json
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

import requests

from jogo_empatia.services.game.results import SkillScores

logger = logging.getLogger(__name__)


@dataclass
class ServerConfig:
    server_ip: str = '127.0.0.1'
    server_port: str = '3000'

    @property
    def base_url(self) -> str:
        return f"http://{self.server_ip}:{self.server_port}"

    @classmethod
    def load(cls, path: Optional[str], default_ip: str = '127.0.0.1', default_port: str = '3000') -> 'ServerConfig':
        """Read ``{"serverIP": ..., "serverPort": ...}``; fall back to defaults when missing."""
        config = cls(server_ip=default_ip, server_port=str(default_port))
        if not path:
            logger.warning('[nfc-config] no server config path, using defaults')
            return config
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.warning(f"[nfc-config] server config not found: {path}; using {config.base_url}")
            return config
        except (OSError, ValueError) as exc:
            logger.warning(f"[nfc-config] could not read {path}: {exc}; using {config.base_url}")
            return config
        if isinstance(data, dict) and data.get('serverIP'):
            config.server_ip = str(data['serverIP'])
            if data.get('serverPort'):
                config.server_port = str(data['serverPort'])
            logger.info(f"[nfc-config] loaded {config.base_url}")
        else:
            logger.warning(f"[nfc-config] {path} has no serverIP; using {config.base_url}")
        return config


@dataclass
class PendingSubmission:
    scores: SkillScores
    external_id: str = ''
    ref: Any = None


def _run_inline(fn, *args):
    fn(*args)


class RemoteSubmitter:
    """Holds at most one finished game result until a card is tapped.

    The tap consumes the pending result exactly once and fires a single POST
    to ``/users/<card id>``; there is no retry.
    """

    def __init__(
        self,
        server: ServerConfig,
        game_id: int,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
        run_async: Callable[..., Any] = _run_inline,
        on_success: Optional[Callable[[PendingSubmission, Any], None]] = None,
        on_failure: Optional[Callable[[PendingSubmission, str], None]] = None,
        on_discard: Optional[Callable[[PendingSubmission], None]] = None,
    ):
        self.server = server
        self.game_id = game_id
        self.timeout = timeout
        self.session = session or requests.Session()
        self.run_async = run_async
        self.on_success = on_success
        self.on_failure = on_failure
        self.on_discard = on_discard
        self.last_external_id: Optional[str] = None
        self._pending: Optional[PendingSubmission] = None
        self._lock = threading.Lock()

    @property
    def pending(self) -> Optional[PendingSubmission]:
        with self._lock:
            return self._pending

    def queue_submission(self, scores: SkillScores, ref: Any = None) -> PendingSubmission:
        submission = PendingSubmission(scores=scores, external_id='', ref=ref)
        with self._lock:
            replaced, self._pending = self._pending, submission
        if replaced is not None:
            logger.warning(f"[nfc-queue] replacing unconsumed result ref={replaced.ref}")
            if self.on_discard:
                self.on_discard(replaced)
        logger.info(f"[nfc-queue] waiting for card: {scores.to_dict()} ref={ref}")
        return submission

    def clear(self) -> None:
        with self._lock:
            self._pending = None

    def on_external_identifier_received(self, external_id: str, reader_name: str = '') -> bool:
        """Attach a tapped card id to the pending result and send it.

        Returns False (no HTTP call) when nothing is pending or the id is empty.
        """
        logger.info(f"[nfc-read] card={external_id} reader={reader_name or '-'}")
        if not external_id:
            logger.warning('[nfc-read] empty card id ignored')
            return False
        with self._lock:
            self.last_external_id = external_id
            submission, self._pending = self._pending, None
        if submission is None:
            logger.warning(f"[nfc-read] card {external_id} read but no game result is pending")
            return False
        submission.external_id = external_id
        self.run_async(self._send, submission)
        return True

    def build_payload(self, submission: PendingSubmission) -> dict:
        return {
            'nfcId': submission.external_id,
            'gameId': self.game_id,
            'skill1': submission.scores.empathy,
            'skill2': submission.scores.active_listening,
            'skill3': submission.scores.self_awareness,
        }

    def url_for(self, external_id: str) -> str:
        return f"{self.server.base_url}/users/{external_id}"

    def _send(self, submission: PendingSubmission) -> bool:
        url = self.url_for(submission.external_id)
        payload = self.build_payload(submission)
        logger.info(f"[nfc-post] POST {url} payload={payload}")
        try:
            response = self.session.post(
                url,
                json=payload,
                headers={'Content-Type': 'application/json'},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error(f"[nfc-post] failed for {url}: {exc}")
            if self.on_failure:
                self.on_failure(submission, str(exc))
            return False

        if response.status_code != 200:
            logger.error(f"[nfc-post] failed for {url}: status={response.status_code} body={response.text!r}")
            if self.on_failure:
                self.on_failure(submission, f"HTTP {response.status_code}")
            return False

        logger.info(f"[nfc-post] success for card {submission.external_id}: {response.text!r}")
        if self.on_success:
            self.on_success(submission, response)
        return True
