import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from brainbrawl.models import Answer, Round
from .powerups import PowerUpState, beast_mode_multiplier
from .roster import Roster


@dataclass
class RoundResult:
    breakdown: List[dict] = field(default_factory=list)
    team_points: Dict[str, int] = field(default_factory=dict)
    beast_mode_team: Optional[str] = None
    beast_mode_multiplier: Optional[int] = None


def answer_points(answer: Answer, points_per_second: int) -> int:
    """Time-weighted points for a correct answer: whole seconds left times rate."""
    elapsed = answer.timestamp - answer.window_start
    remaining = max(0.0, answer.timer_length - elapsed)
    return int(math.floor(remaining * points_per_second))


def score_current_round(roster: Roster, current: Round, powerups: PowerUpState,
                        points_per_second: int, team_vs_team: bool = True) -> RoundResult:
    """Apply scoring for the current round.

    Correct answers earn time-weighted base points, incorrect ones earn
    nothing. Accuracy counters move for every recorded answer. If a team has
    Beast Mode active its members' points are multiplied by the outcome of
    the whole team, then every player and team total is committed.
    """
    result = RoundResult()
    correct_by_team = Counter()
    entries = []
    for player_id, answer in current.answers.items():
        player = roster.get_player(player_id)
        if not player:
            continue
        correct = answer.choice == current.question.correct_position
        player.attempts += 1
        if correct:
            player.correct += 1
            if player.team_id:
                correct_by_team[player.team_id] += 1
        base = answer_points(answer, points_per_second) if correct else 0
        entries.append((player, answer, correct, base))

    beast = powerups.beast_mode
    multiplier = None
    if beast and beast.team_id in roster.teams:
        team = roster.teams[beast.team_id]
        multiplier = beast_mode_multiplier(correct_by_team[team.id], len(team.members))
        result.beast_mode_team = team.id
        result.beast_mode_multiplier = multiplier

    for player, answer, correct, base in entries:
        points = base
        if multiplier is not None and player.team_id == result.beast_mode_team:
            points = base * multiplier
        player.score += points
        if team_vs_team and player.team_id:
            team = roster.get_team(player.team_id)
            if team:
                team.score += points
                result.team_points[team.id] = result.team_points.get(team.id, 0) + points
        result.breakdown.append({
            'playerId': player.id,
            'playerName': player.name,
            'teamId': player.team_id,
            'isCPU': player.is_cpu,
            'buttonIndex': answer.choice,
            'correct': correct,
            'basePoints': base,
            'points': points,
        })
    return result


def build_leaderboard(roster: Roster, team_vs_team: bool = True) -> dict:
    """Rank players and teams by score; ties keep join order."""
    players = sorted(roster.players.values(), key=lambda p: (-p.score, p.seq))
    player_board = [
        {
            'rank': idx + 1,
            'id': p.id,
            'name': p.name,
            'score': p.score,
            'teamId': p.team_id,
            'isCPU': p.is_cpu,
            'accuracy': round(p.correct / p.attempts, 3) if p.attempts else None,
        }
        for idx, p in enumerate(players)
    ]
    team_board = None
    if team_vs_team:
        teams = sorted(roster.teams.values(), key=lambda t: (-t.score, t.seq))
        team_board = [
            {
                'rank': idx + 1,
                'id': t.id,
                'name': t.name,
                'score': t.score,
                'memberCount': len(t.members),
                'isCPU': t.is_cpu,
            }
            for idx, t in enumerate(teams)
        ]
    return {'players': player_board, 'teams': team_board}
