import json
import logging
import os
import tempfile
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

ROUND_FILENAMES = (
    'round1_scores.json',
    'round2_scores.json',
    'round3_scores.json',
)


@dataclass
class WordTally:
    """Selection tally for one word of a round.

    ``points`` is the session value (reset every round); ``cumulative_points``
    survives across players and never drops below 1.
    """
    text: str
    points: int = 1
    cumulative_points: int = 1

    def to_dict(self) -> dict:
        return {
            'text': self.text,
            'points': self.points,
            'cumulativePoints': self.cumulative_points,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'WordTally':
        return cls(
            text=str(data.get('text') or ''),
            points=int(data.get('points', 1)),
            cumulative_points=max(1, int(data.get('cumulativePoints', 1))),
        )


def default_tallies(word_texts: Sequence[str]) -> List[WordTally]:
    return [WordTally(text=t, points=1, cumulative_points=1) for t in word_texts]


class WordScoreStore:
    """One JSON file of word tallies per round index (0, 1, 2)."""

    def __init__(self, folder: str):
        self.folder = folder
        try:
            os.makedirs(self.folder, exist_ok=True)
        except OSError as exc:
            logger.error(f"[word-scores] could not create folder {self.folder}: {exc}")
        logger.info(f"[word-scores] saving to {self.folder}")

    def file_path(self, round_index: int) -> Optional[str]:
        if not isinstance(round_index, int) or not 0 <= round_index < len(ROUND_FILENAMES):
            logger.error(f"[word-scores] invalid round index: {round_index}")
            return None
        return os.path.join(self.folder, ROUND_FILENAMES[round_index])

    def load(self, round_index: int, expected_word_texts: Sequence[str]) -> List[WordTally]:
        """Load tallies for a round, synthesizing defaults when nothing usable is stored.

        Stored entries are realigned to ``expected_word_texts``: words missing
        from the file get default tallies and words no longer in the round are
        dropped.
        """
        stored = self._read_stored(round_index)
        if not stored:
            return default_tallies(expected_word_texts)

        by_text: Dict[str, WordTally] = {}
        for tally in stored:
            by_text.setdefault(tally.text, tally)
        expected = set(expected_word_texts)
        unknown = [t for t in by_text if t not in expected]
        if unknown:
            logger.warning(f"[word-scores] round {round_index + 1} drops unknown words: {unknown}")

        tallies = [by_text.get(text) or WordTally(text=text) for text in expected_word_texts]
        logger.debug(
            f"[word-scores] loaded round {round_index + 1}: "
            + ', '.join(f"{t.text}={t.cumulative_points}" for t in tallies)
        )
        return tallies

    def _read_stored(self, round_index: int) -> List[WordTally]:
        """Stored tallies exactly as on disk; empty when missing or unreadable."""
        path = self.file_path(round_index)
        if path is None:
            return []
        if not os.path.exists(path):
            logger.info(f"[word-scores] no file for round {round_index + 1}, using defaults")
            return []
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return [WordTally.from_dict(w) for w in (data or {}).get('words') or []]
        except (OSError, ValueError, TypeError, AttributeError) as exc:
            logger.error(f"[word-scores] failed to load round {round_index + 1}: {exc}")
            return []

    def save(self, round_index: int, tallies: Sequence[WordTally]) -> bool:
        path = self.file_path(round_index)
        if path is None:
            return False

        payload = {'words': [t.to_dict() for t in tallies]}
        tmp_path = None
        try:
            os.makedirs(self.folder, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix='.round', suffix='.tmp', dir=self.folder)
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(payload, f, ensure_ascii=False, indent=4)
            os.replace(tmp_path, path)
        except OSError as exc:
            logger.error(f"[word-scores] failed to save round {round_index + 1}: {exc}")
            if tmp_path and os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    pass
            return False

        logger.info(f"[word-scores] saved round {round_index + 1}: {len(payload['words'])} words -> {path}")
        return True

    def update_word_score(self, round_index: int, word_text: str, points_to_add: int = 1) -> bool:
        if self.file_path(round_index) is None:
            return False
        # Other words in the file keep their tallies
        tallies = self._read_stored(round_index)
        target = next((t for t in tallies if t.text == word_text), None)
        if target is None:
            logger.info(f"[word-scores] adding word '{word_text}' to round {round_index + 1}")
            target = WordTally(text=word_text)
            tallies.append(target)
        target.cumulative_points = max(1, target.cumulative_points + points_to_add)
        return self.save(round_index, tallies)

    def reset_all(self) -> None:
        """Delete all persisted round data."""
        for idx in range(len(ROUND_FILENAMES)):
            path = self.file_path(idx)
            if path and os.path.exists(path):
                try:
                    os.remove(path)
                    logger.info(f"[word-scores] deleted round {idx + 1} data")
                except OSError as exc:
                    logger.error(f"[word-scores] failed to delete round {idx + 1} data: {exc}")

    def dump_all(self) -> Dict[int, Optional[dict]]:
        """Raw stored JSON per round number (1-based); None when absent or unreadable."""
        out: Dict[int, Optional[dict]] = {}
        for idx in range(len(ROUND_FILENAMES)):
            path = self.file_path(idx)
            out[idx + 1] = None
            if path and os.path.exists(path):
                try:
                    with open(path, 'r', encoding='utf-8') as f:
                        out[idx + 1] = json.load(f)
                except (OSError, ValueError) as exc:
                    logger.error(f"[word-scores] failed to read round {idx + 1}: {exc}")
        return out
