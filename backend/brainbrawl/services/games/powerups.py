"""Blitz and Beast Mode: one-shot team power-ups.

Blitz spends a team's one-shot flag to cut the opposing team's answer
window for the rest of the current round. Beast Mode stakes the activating
team's round score on how many of its members answer correctly; each
player can trigger it once per match.
"""
from dataclasses import dataclass, field
from typing import Optional, Set

from brainbrawl.models import GameState, Player, Team
from .exceptions import BeastModeError, BlitzError

BEAST_MODE_ALREADY_USED = 'You have already used Beast Mode this match'
BEAST_MODE_OTHER_TEAM_ACTIVE = 'Another team already activated Beast Mode this round'
BEAST_MODE_TEAM_ACTIVE = 'Beast Mode is already active for your team'
BEAST_MODE_NOT_PLAYING = 'Beast Mode can only be activated during a round'
BEAST_MODE_NO_TEAM = 'Join a team to use Beast Mode'

BLITZ_NO_TEAM = 'Join a team to use Blitz'
BLITZ_SPENT = 'Your team has already used its Blitz'
BLITZ_NOT_PLAYING = 'Blitz can only be used during a round'
BLITZ_ALREADY_ACTIVE = 'A Blitz is already active this round'
BLITZ_NO_TARGET = 'There is no opposing team to Blitz'


@dataclass
class BlitzActivation:
    actor_id: str
    actor_name: str
    actor_team_id: str
    target_team_id: str


@dataclass
class BeastModeActivation:
    team_id: str
    actor_id: str
    actor_name: str


@dataclass
class PowerUpState:
    blitz: Optional[BlitzActivation] = None
    beast_mode: Optional[BeastModeActivation] = None
    beast_mode_used: Set[str] = field(default_factory=set)

    def start_round(self) -> None:
        self.blitz = None
        self.beast_mode = None

    def reset_match(self) -> None:
        self.start_round()
        self.beast_mode_used.clear()

    def summary(self, teams) -> dict:
        """Round usage record for round:ended and snapshots."""
        blitz = None
        if self.blitz:
            blitz = {
                'actor': self.blitz.actor_name,
                'actorTeam': _team_name(teams, self.blitz.actor_team_id),
                'targetTeam': _team_name(teams, self.blitz.target_team_id),
            }
        beast = None
        if self.beast_mode:
            beast = {
                'actor': self.beast_mode.actor_name,
                'team': _team_name(teams, self.beast_mode.team_id),
            }
        return {'blitz': blitz, 'beastMode': beast, 'beastModeUsed': sorted(self.beast_mode_used)}


def _team_name(teams, team_id):
    team = teams.get(team_id)
    return team.name if team else None


def activate_blitz(state: PowerUpState, player: Player, team: Optional[Team],
                   target: Optional[Team], game_state: GameState) -> BlitzActivation:
    if team is None:
        raise BlitzError(BLITZ_NO_TEAM)
    if not team.blitz_available:
        raise BlitzError(BLITZ_SPENT)
    if game_state != GameState.PLAYING:
        raise BlitzError(BLITZ_NOT_PLAYING)
    if state.blitz is not None:
        raise BlitzError(BLITZ_ALREADY_ACTIVE)
    if target is None:
        raise BlitzError(BLITZ_NO_TARGET)
    team.blitz_available = False
    state.blitz = BlitzActivation(
        actor_id=player.id,
        actor_name=player.name,
        actor_team_id=team.id,
        target_team_id=target.id,
    )
    return state.blitz


def activate_beast_mode(state: PowerUpState, player: Player, team: Optional[Team],
                        game_state: GameState) -> BeastModeActivation:
    if player.id in state.beast_mode_used:
        raise BeastModeError(BEAST_MODE_ALREADY_USED)
    if game_state != GameState.PLAYING:
        raise BeastModeError(BEAST_MODE_NOT_PLAYING)
    if team is None:
        raise BeastModeError(BEAST_MODE_NO_TEAM)
    if state.beast_mode is not None:
        if state.beast_mode.team_id != team.id:
            raise BeastModeError(BEAST_MODE_OTHER_TEAM_ACTIVE)
        raise BeastModeError(BEAST_MODE_TEAM_ACTIVE)
    state.beast_mode = BeastModeActivation(team_id=team.id, actor_id=player.id, actor_name=player.name)
    state.beast_mode_used.add(player.id)
    return state.beast_mode


def beast_mode_multiplier(correct_count: int, roster_size: int) -> int:
    """2x when every member is right, unchanged when one missed, else nothing."""
    if roster_size <= 0:
        return 0
    if correct_count >= roster_size:
        return 2
    if roster_size > 1 and correct_count == roster_size - 1:
        return 1
    return 0


def cpu_blitz_chance(round_number: int, per_round: float) -> float:
    return min(1.0, per_round * round_number)
