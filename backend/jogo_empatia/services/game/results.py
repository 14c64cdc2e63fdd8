import math
from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence, Tuple

from .word_scores import WordTally

MAX_SCORE = 12
MAX_SEGMENTS = 22
ACTIVE_LISTENING_WEIGHT = 0.875
SELF_AWARENESS_WEIGHT = 0.6875

# Words that receive each skill's points on the result screen word cloud
SKILL_BONUS_WORDS = {
    'empathy': ('Empatia', 'Respeito ao cliente', 'Compromisso'),
    'active_listening': ('Colaboração', 'Parceria', 'Resolução de problemas'),
    'self_awareness': ('Adaptação', 'Resiliência', 'Estratégia'),
}


@dataclass(frozen=True)
class SkillScores:
    empathy: int
    active_listening: int
    self_awareness: int

    def to_dict(self) -> dict:
        return {
            'empathy': self.empathy,
            'active_listening': self.active_listening,
            'self_awareness': self.self_awareness,
        }


def compute_skill_scores(final_score: int, max_score: int = MAX_SCORE, max_segments: int = MAX_SEGMENTS) -> SkillScores:
    """Map a final empathy score onto three segmented-bar values.

    ratio = clamp(final_score / max_score, 0, 1); each skill is the ceiling of
    ratio * max_segments times its weight (1, 0.875, 0.6875).
    """
    if max_score <= 0:
        ratio = 0.0
    else:
        ratio = min(1.0, max(0.0, final_score / max_score))
    return SkillScores(
        empathy=math.ceil(ratio * max_segments),
        active_listening=math.ceil(ratio * max_segments * ACTIVE_LISTENING_WEIGHT),
        self_awareness=math.ceil(ratio * max_segments * SELF_AWARENESS_WEIGHT),
    )


def top_words(tally_map: Mapping[str, int], n: int = 5) -> List[Tuple[str, int]]:
    """Highest scoring words first; equal scores keep insertion order."""
    if n <= 0:
        return []
    ranked = sorted(tally_map.items(), key=lambda item: item[1], reverse=True)
    return ranked[:n]


class WordCloud:
    """Word scores behind the kiosk word cloud.

    Holds the current round's tallies (for font sizing) and a free-form score
    map fed by ``add_word_points`` (used for the top-words ranking).
    """

    def __init__(self, min_font_size: float = 20.0, max_font_size: float = 80.0):
        self.min_font_size = min_font_size
        self.max_font_size = max_font_size
        self.round_words: List[WordTally] = []
        self.scores: Dict[str, int] = {}

    def load_round(self, tallies: Sequence[WordTally]) -> None:
        if not tallies:
            return
        self.round_words = [WordTally(t.text, t.points, t.cumulative_points) for t in tallies]
        self.scores = {}

    def add_word_points(self, word_text: str, points: int = 1) -> None:
        if not word_text:
            return
        self.scores[word_text] = max(0, self.scores.get(word_text, 0) + points)

    def apply_skill_bonus(self, skills: SkillScores) -> None:
        for skill, words in SKILL_BONUS_WORDS.items():
            for word in words:
                self.add_word_points(word, getattr(skills, skill))

    def word_score(self, word_text: str) -> int:
        return self.scores.get(word_text, 0)

    def top_words(self, n: int = 5) -> List[Tuple[str, int]]:
        return top_words(self.scores, n)

    def top_word(self):
        ranked = self.top_words(1)
        return ranked[0][0] if ranked else None

    def reset(self) -> None:
        self.scores = {}
        self.round_words = []

    def display_weights(self) -> List[dict]:
        if not self.round_words:
            return []
        lo = min(w.cumulative_points for w in self.round_words)
        hi = max(w.cumulative_points for w in self.round_words)
        out = []
        for w in self.round_words:
            if hi > lo:
                norm = (w.cumulative_points - lo) / (hi - lo)
            else:
                norm = 0.5
            norm = min(1.0, max(0.0, norm))
            out.append({
                'text': w.text,
                'cumulative_points': w.cumulative_points,
                'weight': norm,
                'font_size': self.min_font_size + (self.max_font_size - self.min_font_size) * norm,
            })
        return out
