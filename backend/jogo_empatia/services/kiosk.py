"""Kiosk wiring: builds the game services once and connects game completion
to result projection, the result ledger and the NFC submitter.
"""

import logging
import threading
from typing import Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from jogo_empatia import db, socketio
from jogo_empatia.models import GameResult, RESULT_DISCARDED, RESULT_FAILED, RESULT_PENDING, RESULT_SENT
from jogo_empatia.services.game.results import MAX_SCORE, WordCloud, compute_skill_scores
from jogo_empatia.services.game.rounds import DEFAULT_ROUNDS, RoundEngine, RoundOutcome
from jogo_empatia.services.game.word_scores import WordScoreStore
from jogo_empatia.services.i18n import Localizer
from jogo_empatia.services.nfc.submitter import PendingSubmission, RemoteSubmitter, ServerConfig

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'jogo_empatia'
KIOSK_ROOM = 'kiosk'
NAMESPACE = '/ws'


def emit_to_kiosk(event: str, payload: dict) -> None:
    socketio.emit(event, payload, to=KIOSK_ROOM, namespace=NAMESPACE)


class Kiosk:
    def __init__(self, app, engine: RoundEngine, cloud: WordCloud, localizer: Localizer, submitter: RemoteSubmitter, top_words_count: int = 5):
        self.app = app
        self.engine = engine
        self.cloud = cloud
        self.localizer = localizer
        self.submitter = submitter
        self.top_words_count = top_words_count
        self.last_result: Optional[dict] = None
        # Serializes round mutations coming from concurrent HTTP/socket handlers
        self._lock = threading.RLock()

    @property
    def store(self) -> Optional[WordScoreStore]:
        return self.engine.store

    def start_game(self) -> dict:
        with self._lock:
            self.engine.start_game()
            self.cloud.reset()
            self.cloud.load_round(self.engine.tallies)
            self.last_result = None
            return self.state()

    def toggle_selection(self, index: int) -> bool:
        with self._lock:
            return self.engine.toggle_selection(index)

    def confirm_round(self) -> RoundOutcome:
        with self._lock:
            confirmed_tallies = self.engine.tallies
            outcome = self.engine.confirm_round()
            # The confirmed round's tallies feed the summary cloud even when the engine already moved on
            self.cloud.load_round(confirmed_tallies)
            if outcome.completed:
                self.complete_game(outcome.total_score)
            return outcome

    def continue_round(self) -> RoundOutcome:
        with self._lock:
            outcome = self.engine.continue_round()
            if outcome.completed:
                self.complete_game(outcome.total_score)
            else:
                self.cloud.load_round(self.engine.tallies)
            return outcome

    def complete_game(self, total_score: int) -> dict:
        skills = compute_skill_scores(total_score)
        self.cloud.apply_skill_bonus(skills)

        result_id = None
        try:
            record = GameResult(
                total_score=total_score,
                skill1=skills.empathy,
                skill2=skills.active_listening,
                skill3=skills.self_awareness,
                status=RESULT_PENDING,
            )
            db.session.add(record)
            db.session.flush()
            result_id = record.id
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.error(f"[game-result] could not record result: {exc}")

        self.submitter.queue_submission(skills, ref=result_id)
        self.last_result = {
            'result_id': result_id,
            'total_score': total_score,
            'max_score': MAX_SCORE,
            'skills': skills.to_dict(),
            'top_words': [{'text': w, 'points': p} for w, p in self.cloud.top_words(self.top_words_count)],
            'submission_status': RESULT_PENDING,
        }
        logger.info(f"[game-result] id={result_id} total={total_score} skills={skills.to_dict()}")
        emit_to_kiosk('game_completed', self.last_result)
        return self.last_result

    def state(self) -> dict:
        payload = self.engine.state()
        payload['language'] = self.localizer.language
        payload['word_cloud'] = self.cloud.display_weights()
        payload['result'] = self.last_result
        return payload

    # ---- Submission callbacks (may run on a background task) ----

    def _update_result(self, ref, status: str, nfc_id: Optional[str] = None, error: Optional[str] = None) -> None:
        if ref is None:
            return
        with self.app.app_context():
            try:
                record = db.session.get(GameResult, ref)
                if record is None:
                    return
                record.status = status
                if nfc_id:
                    record.nfc_id = nfc_id
                record.error = error
                db.session.add(record)
                db.session.commit()
            except SQLAlchemyError as exc:
                db.session.rollback()
                logger.error(f"[game-result] could not mark result {ref} as {status}: {exc}")

    def _set_last_status(self, ref, status: str) -> None:
        with self._lock:
            if self.last_result is not None and self.last_result.get('result_id') == ref:
                self.last_result['submission_status'] = status

    def handle_submission_success(self, submission: PendingSubmission, response) -> None:
        self._update_result(submission.ref, RESULT_SENT, nfc_id=submission.external_id)
        self._set_last_status(submission.ref, RESULT_SENT)
        emit_to_kiosk('submission_succeeded', {
            'nfc_id': submission.external_id,
            'result_id': submission.ref,
        })

    def handle_submission_failure(self, submission: PendingSubmission, reason: str) -> None:
        self._update_result(submission.ref, RESULT_FAILED, nfc_id=submission.external_id, error=reason)
        self._set_last_status(submission.ref, RESULT_FAILED)
        emit_to_kiosk('submission_failed', {
            'nfc_id': submission.external_id,
            'result_id': submission.ref,
        })

    def handle_submission_discard(self, submission: PendingSubmission) -> None:
        self._update_result(submission.ref, RESULT_DISCARDED)


def build_kiosk(app) -> Kiosk:
    """Construct every game service once for the given Flask app."""
    cfg = app.config
    store = WordScoreStore(cfg['WORD_SCORES_DIR'])
    engine = RoundEngine(
        rounds=DEFAULT_ROUNDS,
        store=store,
        require_minimum_selection=bool(cfg.get('REQUIRE_MINIMUM_SELECTION', True)),
        has_summary_continue_step=bool(cfg.get('HAS_SUMMARY_CONTINUE_STEP', True)),
    )
    localizer = Localizer.from_file(cfg.get('LANGUAGE_FILE'), language=cfg.get('DEFAULT_LANGUAGE', 'pt'))
    server = ServerConfig.load(
        cfg.get('SERVER_CONFIG_PATH'),
        default_ip=cfg.get('DEFAULT_SERVER_IP', '127.0.0.1'),
        default_port=cfg.get('DEFAULT_SERVER_PORT', '3000'),
    )

    if cfg.get('TESTING') and not cfg.get('ENABLE_BACKGROUND_SUBMIT_IN_TESTS'):
        def run_async(fn, *args):
            fn(*args)
    else:
        run_async = socketio.start_background_task

    submitter = RemoteSubmitter(
        server=server,
        game_id=int(cfg.get('GAME_ID', 4)),
        timeout=float(cfg.get('SUBMIT_TIMEOUT_SEC', 10)),
        session=cfg.get('SUBMIT_HTTP_SESSION'),
        run_async=run_async,
    )
    kiosk = Kiosk(
        app,
        engine=engine,
        cloud=WordCloud(),
        localizer=localizer,
        submitter=submitter,
        top_words_count=int(cfg.get('TOP_WORDS_COUNT', 5)),
    )
    submitter.on_success = kiosk.handle_submission_success
    submitter.on_failure = kiosk.handle_submission_failure
    submitter.on_discard = kiosk.handle_submission_discard
    return kiosk


def get_kiosk() -> Kiosk:
    return current_app.extensions[EXTENSION_KEY]
