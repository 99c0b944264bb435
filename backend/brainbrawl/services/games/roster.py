import itertools
from typing import Dict, Iterator, List, Optional

from brainbrawl.models import Player, Team
from .exceptions import TeamError
from .settings import GameSettings


class Roster:
    """Connected players, their teams, and the team membership rules.

    Unknown player or team ids make the team operations return None without
    raising; rule violations a client should hear about raise TeamError.
    """

    def __init__(self, settings: GameSettings):
        self.settings = settings
        self.players: Dict[str, Player] = {}
        self.teams: Dict[str, Team] = {}
        self._seq = itertools.count(1)
        self._team_ids = itertools.count(1)
        self._cpu_ids = itertools.count(1)
        self._cpu_names_used = 0

    # ---- lookups ----

    def get_player(self, player_id: str) -> Optional[Player]:
        return self.players.get(player_id)

    def get_team(self, team_id: Optional[str]) -> Optional[Team]:
        if team_id is None:
            return None
        return self.teams.get(team_id)

    def team_of(self, player: Player) -> Optional[Team]:
        return self.get_team(player.team_id)

    def members(self, team: Team) -> List[Player]:
        return [self.players[pid] for pid in team.members if pid in self.players]

    def human_members(self, team: Team) -> List[Player]:
        return [p for p in self.members(team) if not p.is_cpu]

    def cpu_players(self) -> Iterator[Player]:
        return (p for p in self.players.values() if p.is_cpu)

    def human_players(self) -> Iterator[Player]:
        return (p for p in self.players.values() if not p.is_cpu)

    def opponent_of(self, team_id: str) -> Optional[Team]:
        for team in self.teams.values():
            if team.id != team_id:
                return team
        return None

    # ---- players ----

    def add_player(self, player_id: str, name: str) -> Player:
        existing = self.players.get(player_id)
        if existing:
            existing.name = name
            return existing
        player = Player(id=player_id, name=name, seq=next(self._seq))
        self.players[player_id] = player
        return player

    def remove_player(self, player_id: str) -> bool:
        """Drop a human player; CPU players only leave on reset."""
        player = self.players.get(player_id)
        if not player or player.is_cpu:
            return False
        team = self.team_of(player)
        if team:
            team.members = [pid for pid in team.members if pid != player_id]
            if not team.members and not team.is_cpu:
                del self.teams[team.id]
        del self.players[player_id]
        return True

    # ---- teams ----

    def create_team(self, player_id: str, name: str) -> Optional[Team]:
        player = self.players.get(player_id)
        if not player:
            return None
        if player.team_id:
            raise TeamError('You are already on a team')
        if len(self.teams) >= self.settings.max_teams:
            raise TeamError(f'Only {self.settings.max_teams} teams can be created - join an existing team')
        team = self._new_team(name or f"{player.name}'s Team")
        self._seat(player, team)
        return team

    def join_team(self, player_id: str, team_id: str) -> Optional[Team]:
        player = self.players.get(player_id)
        team = self.get_team(team_id)
        if not player or not team:
            return None
        if player.team_id:
            raise TeamError('You are already on a team')
        if team.is_cpu:
            raise TeamError('CPU teams cannot be joined')
        if len(self.human_members(team)) >= self.settings.players_per_team:
            raise TeamError(f'{team.name} is full')
        self._seat(player, team)
        return team

    def seat_free_agents(self) -> None:
        """Put teamless humans on the emptiest team that still has a seat."""
        for player in list(self.human_players()):
            if player.team_id:
                continue
            open_teams = [t for t in self.teams.values() if len(t.members) < self.settings.players_per_team]
            if not open_teams:
                return
            self._seat(player, min(open_teams, key=lambda t: (len(t.members), t.seq)))

    def fill_with_cpu(self) -> List[Team]:
        """Ensure exactly two teams exist and pad every roster with CPU players."""
        names = iter(self.settings.cpu_team_names)
        while len(self.teams) < self.settings.max_teams:
            self._new_team(next(names, f'CPU Team {len(self.teams) + 1}'), is_cpu=True)
        self.seat_free_agents()
        teams = list(self.teams.values())[:self.settings.max_teams]
        for team in teams:
            while len(team.members) < self.settings.players_per_team:
                self._seat(self._new_cpu_player(), team)
        return teams

    # ---- match lifecycle ----

    def reset_scores(self) -> None:
        for player in self.players.values():
            player.score = 0
        for team in self.teams.values():
            team.score = 0

    def reset(self) -> None:
        """Back to lobby: CPUs gone, scores and accuracy zeroed, Blitz restored."""
        cpu_ids = {p.id for p in self.cpu_players()}
        for pid in cpu_ids:
            del self.players[pid]
        for team in list(self.teams.values()):
            team.members = [pid for pid in team.members if pid not in cpu_ids]
            if not team.members:
                del self.teams[team.id]
                continue
            # a synthesized team that still seats humans becomes a human team
            team.is_cpu = False
            team.score = 0
            team.blitz_available = True
        for player in self.players.values():
            player.score = 0
            player.attempts = 0
            player.correct = 0
        self._cpu_names_used = 0

    # ---- internals ----

    def _new_team(self, name: str, is_cpu: bool = False) -> Team:
        prefix = 'cpu_team' if is_cpu else 'team'
        team = Team(id=f'{prefix}_{next(self._team_ids)}', name=name, seq=next(self._seq), is_cpu=is_cpu)
        self.teams[team.id] = team
        return team

    def _new_cpu_player(self) -> Player:
        pool = self.settings.cpu_player_names or ('Bot',)
        lap, idx = divmod(self._cpu_names_used, len(pool))
        name = pool[idx] if lap == 0 else f'{pool[idx]} {lap + 1}'
        self._cpu_names_used += 1
        player = Player(id=f'cpu_{next(self._cpu_ids)}', name=name, seq=next(self._seq), is_cpu=True)
        self.players[player.id] = player
        return player

    @staticmethod
    def _seat(player: Player, team: Team) -> None:
        player.team_id = team.id
        team.members.append(player.id)
