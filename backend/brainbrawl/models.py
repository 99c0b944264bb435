from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class GameState(str, Enum):
    LOBBY = 'lobby'
    SPLASH = 'splash'
    PLAYING = 'playing'
    LEADERBOARD = 'leaderboard'
    FINISHED = 'finished'


@dataclass
class Player:
    id: str
    name: str
    seq: int
    score: int = 0
    team_id: Optional[str] = None
    is_cpu: bool = False
    attempts: int = 0
    correct: int = 0

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'score': self.score,
            'teamId': self.team_id,
            'isCPU': self.is_cpu,
            'attempts': self.attempts,
            'correct': self.correct,
        }


@dataclass
class Team:
    id: str
    name: str
    seq: int
    members: List[str] = field(default_factory=list)
    score: int = 0
    is_cpu: bool = False
    blitz_available: bool = True

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'members': list(self.members),
            'score': self.score,
            'isCPU': self.is_cpu,
            'blitzAvailable': self.blitz_available,
        }


@dataclass(frozen=True)
class Question:
    text: str
    answers: Tuple[int, int, int]
    correct_position: int  # 1-indexed

    @property
    def correct_value(self) -> int:
        return self.answers[self.correct_position - 1]


@dataclass(frozen=True)
class Answer:
    choice: int
    timestamp: float
    # Answer window in force when the answer was given (shortened by Blitz)
    window_start: float
    timer_length: float


@dataclass
class Round:
    number: int
    question: Question
    started_at: float
    timer_length: int
    team_timers: Dict[str, float] = field(default_factory=dict)
    team_window_start: Dict[str, float] = field(default_factory=dict)
    answers: Dict[str, Answer] = field(default_factory=dict)

    def window_for(self, team_id: Optional[str]) -> Tuple[float, float]:
        """Return (window_start, timer_length) for a member of ``team_id``."""
        if team_id in self.team_timers:
            return self.team_window_start[team_id], self.team_timers[team_id]
        return self.started_at, self.timer_length


@dataclass
class Match:
    state: GameState = GameState.LOBBY
    current_round: int = 0
    timer_length: int = 30
    round: Optional[Round] = None
    # Bumped on every start/reset so timers armed for an older match never apply
    generation: int = 0
