import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set, Tuple

from .word_scores import WordScoreStore, WordTally, default_tallies

logger = logging.getLogger(__name__)

STAGE_IDLE = 'idle'
STAGE_ROUND_ACTIVE = 'round_active'
STAGE_ROUND_SUMMARY = 'round_summary'
STAGE_COMPLETED = 'completed'


class GameFlowError(Exception):
    """Base class for round flow misuse reported back to the UI."""


class InvalidTransition(GameFlowError):
    pass


class EmptySelection(GameFlowError):
    pass


@dataclass(frozen=True)
class WordChoice:
    text: str
    is_empathetic: bool


@dataclass(frozen=True)
class RoundDefinition:
    words: Tuple[WordChoice, ...]

    @property
    def word_texts(self) -> List[str]:
        return [w.text for w in self.words]


def _round(*pairs: Tuple[str, bool]) -> RoundDefinition:
    return RoundDefinition(words=tuple(WordChoice(text, emp) for text, emp in pairs))


DEFAULT_ROUNDS: Tuple[RoundDefinition, ...] = (
    _round(
        ('Adaptação', True),
        ('Resolução de problema', True),
        ('Compromisso', True),
        ('Respeito ao cliente', True),
        ('Desengajado', False),
        ('Falta de profissionalismo', False),
        ('Falta de comunicação', False),
        ('Negligente', False),
    ),
    _round(
        ('Desleixo', False),
        ('Resiliência', True),
        ('Amadorismo', False),
        ('Prioridade', True),
        ('Adaptação', True),
        ('Falta de respeito', False),
        ('Compromisso', True),
        ('Falta de atenção', False),
    ),
    _round(
        ('Improdutividade', False),
        ('Resolução de problemas', True),
        ('Desorganização', False),
        ('Estratégia', True),
        ('Distração', False),
        ('Colaboração', True),
        ('Descomprometimento', False),
        ('Parceria', True),
    ),
)


@dataclass
class RoundOutcome:
    round_index: int
    round_score: int
    selected_words: List[str]
    total_score: int
    stage: str
    completed: bool = False


@dataclass
class GameSession:
    current_round_index: int = 0
    total_empathy_score: int = 0
    stage: str = STAGE_IDLE
    selections: Set[int] = field(default_factory=set)
    last_outcome: Optional[RoundOutcome] = None


class RoundEngine:
    """Drives the three-round progression and the empathy score.

    Scoring: every selected word gains one cumulative point; every selected
    empathetic word adds one to the session total.
    """

    def __init__(
        self,
        rounds: Sequence[RoundDefinition] = DEFAULT_ROUNDS,
        store: Optional[WordScoreStore] = None,
        require_minimum_selection: bool = True,
        has_summary_continue_step: bool = True,
    ):
        self.rounds = tuple(rounds)
        self.store = store
        self.require_minimum_selection = require_minimum_selection
        self.has_summary_continue_step = has_summary_continue_step
        self.session = GameSession()
        self.tallies: List[WordTally] = []

    @property
    def stage(self) -> str:
        return self.session.stage

    @property
    def total_score(self) -> int:
        return self.session.total_empathy_score

    @property
    def max_score(self) -> int:
        return sum(1 for r in self.rounds for w in r.words if w.is_empathetic)

    @property
    def current_round(self) -> Optional[RoundDefinition]:
        idx = self.session.current_round_index
        if 0 <= idx < len(self.rounds):
            return self.rounds[idx]
        return None

    def start_game(self) -> None:
        self.session = GameSession()
        self._start_round(0)
        logger.info(f"[game-start] rounds={len(self.rounds)} min_selection={self.require_minimum_selection} summary_step={self.has_summary_continue_step}")

    def toggle_selection(self, word_index: int) -> bool:
        """Flip one word in or out of the current selection.

        Returns False for an index outside the round's word list.
        """
        if self.session.stage != STAGE_ROUND_ACTIVE:
            raise InvalidTransition(f"cannot select words while stage is '{self.session.stage}'")
        words = self.current_round.words
        if isinstance(word_index, bool) or not isinstance(word_index, int) or not 0 <= word_index < len(words):
            logger.info(f"[round-select] ignoring out of range index {word_index}")
            return False
        selections = self.session.selections
        if word_index in selections:
            selections.remove(word_index)
        else:
            selections.add(word_index)
        return True

    def selected_words(self) -> List[str]:
        rnd = self.current_round
        if rnd is None:
            return []
        return [rnd.words[i].text for i in sorted(self.session.selections)]

    def confirm_round(self) -> RoundOutcome:
        if self.session.stage != STAGE_ROUND_ACTIVE:
            raise InvalidTransition(f"cannot confirm while stage is '{self.session.stage}'")
        if self.require_minimum_selection and not self.session.selections:
            raise EmptySelection('select at least one word before confirming')

        idx = self.session.current_round_index
        rnd = self.rounds[idx]
        round_score = 0
        selected = []
        for i in sorted(self.session.selections):
            choice = rnd.words[i]
            selected.append(choice.text)
            tally = next((t for t in self.tallies if t.text == choice.text), None)
            if tally is not None:
                tally.cumulative_points += 1
            else:
                logger.error(f"[round-confirm] word '{choice.text}' has no tally in round {idx + 1}")
            if choice.is_empathetic:
                round_score += 1

        if self.store is not None:
            if not self.store.save(idx, self.tallies):
                logger.error(f"[round-confirm] could not persist tallies for round {idx + 1}")

        self.session.total_empathy_score += round_score
        logger.info(f"[round-confirm] round={idx + 1} selected={selected} round_score={round_score} total={self.session.total_empathy_score}")

        if self.has_summary_continue_step:
            self.session.stage = STAGE_ROUND_SUMMARY
        else:
            self._advance()

        outcome = RoundOutcome(
            round_index=idx,
            round_score=round_score,
            selected_words=selected,
            total_score=self.session.total_empathy_score,
            stage=self.session.stage,
            completed=self.session.stage == STAGE_COMPLETED,
        )
        self.session.last_outcome = outcome
        return outcome

    def continue_round(self) -> RoundOutcome:
        """Leave the round summary and move on to the next round or finish."""
        if self.session.stage != STAGE_ROUND_SUMMARY:
            raise InvalidTransition(f"cannot continue while stage is '{self.session.stage}'")
        previous = self.session.last_outcome
        self._advance()
        outcome = RoundOutcome(
            round_index=previous.round_index if previous else self.session.current_round_index,
            round_score=previous.round_score if previous else 0,
            selected_words=list(previous.selected_words) if previous else [],
            total_score=self.session.total_empathy_score,
            stage=self.session.stage,
            completed=self.session.stage == STAGE_COMPLETED,
        )
        self.session.last_outcome = outcome
        return outcome

    def _advance(self) -> None:
        next_idx = self.session.current_round_index + 1
        if next_idx < len(self.rounds):
            self._start_round(next_idx)
        else:
            self.session.selections = set()
            self.session.stage = STAGE_COMPLETED
            logger.info(f"[game-finish] total={self.session.total_empathy_score}")

    def _start_round(self, round_index: int) -> None:
        if not 0 <= round_index < len(self.rounds):
            logger.error(f"[round-start] invalid round index: {round_index}")
            return
        rnd = self.rounds[round_index]
        if self.store is None:
            logger.warning('[round-start] no word score store, using default tallies')
            tallies = default_tallies(rnd.word_texts)
        else:
            tallies = self.store.load(round_index, rnd.word_texts)
        for tally in tallies:
            tally.points = 1
        self.tallies = tallies
        self.session.current_round_index = round_index
        self.session.selections = set()
        self.session.stage = STAGE_ROUND_ACTIVE
        logger.info(f"[round-start] round={round_index + 1} words={len(rnd.words)}")

    def state(self) -> dict:
        """JSON-ready snapshot for the kiosk UI."""
        session = self.session
        rnd = self.current_round if session.stage in (STAGE_ROUND_ACTIVE, STAGE_ROUND_SUMMARY) else None
        tally_by_text = {t.text: t for t in self.tallies}
        words = []
        if rnd is not None:
            for i, w in enumerate(rnd.words):
                tally = tally_by_text.get(w.text)
                words.append({
                    'index': i,
                    'text': w.text,
                    'selected': i in session.selections,
                    'cumulative_points': tally.cumulative_points if tally else 1,
                })
        return {
            'stage': session.stage,
            'round_index': session.current_round_index,
            'round_number': session.current_round_index + 1,
            'total_rounds': len(self.rounds),
            'total_score': session.total_empathy_score,
            'max_score': self.max_score,
            'selection_count': len(session.selections),
            'can_confirm': session.stage == STAGE_ROUND_ACTIVE and (bool(session.selections) or not self.require_minimum_selection),
            'words': words,
            'selected_words': self.selected_words() if rnd is not None else [],
        }
