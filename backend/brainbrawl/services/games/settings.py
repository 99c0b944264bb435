from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple


@dataclass(frozen=True)
class GameSettings:
    """Static match configuration, loaded once from the Flask config."""

    feature_teams: bool = True
    feature_cpu_teams: bool = True
    feature_trash_talk: bool = True
    feature_team_vs_team: bool = True
    rounds_per_game: int = 10
    button_count: int = 3
    points_per_second: int = 1
    default_timer_seconds: int = 30
    max_teams: int = 2
    players_per_team: int = 4
    blitz_timer_seconds: int = 3
    splash_duration_sec: int = 5
    leaderboard_duration_sec: int = 8
    cpu_answer_window: float = 0.7
    cpu_blitz_chance_per_round: float = 0.1
    cpu_blitz_delay_sec: int = 2
    trash_talk_phrases: Tuple[str, ...] = ()
    cpu_player_names: Tuple[str, ...] = ('BotAlpha', 'BotBeta', 'RoboOne')
    cpu_team_names: Tuple[str, ...] = ('CPU Crushers', 'AI Avengers')

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'GameSettings':
        defaults = cls()

        def get(key, default):
            return config.get(key, default)

        return cls(
            feature_teams=bool(get('FEATURE_TEAMS', defaults.feature_teams)),
            feature_cpu_teams=bool(get('FEATURE_CPU_TEAMS', defaults.feature_cpu_teams)),
            feature_trash_talk=bool(get('FEATURE_TRASH_TALK', defaults.feature_trash_talk)),
            feature_team_vs_team=bool(get('FEATURE_TEAM_VS_TEAM', defaults.feature_team_vs_team)),
            rounds_per_game=int(get('ROUNDS_PER_GAME', defaults.rounds_per_game)),
            button_count=int(get('BUTTON_COUNT', defaults.button_count)),
            points_per_second=int(get('POINTS_PER_SECOND', defaults.points_per_second)),
            default_timer_seconds=int(get('DEFAULT_TIMER_SECONDS', defaults.default_timer_seconds)),
            max_teams=int(get('MAX_TEAMS', defaults.max_teams)),
            players_per_team=int(get('PLAYERS_PER_TEAM', defaults.players_per_team)),
            blitz_timer_seconds=int(get('BLITZ_TIMER_SECONDS', defaults.blitz_timer_seconds)),
            splash_duration_sec=int(get('SPLASH_DURATION_SEC', defaults.splash_duration_sec)),
            leaderboard_duration_sec=int(get('LEADERBOARD_DURATION_SEC', defaults.leaderboard_duration_sec)),
            cpu_answer_window=float(get('CPU_ANSWER_WINDOW', defaults.cpu_answer_window)),
            cpu_blitz_chance_per_round=float(get('CPU_BLITZ_CHANCE_PER_ROUND', defaults.cpu_blitz_chance_per_round)),
            cpu_blitz_delay_sec=int(get('CPU_BLITZ_DELAY_SEC', defaults.cpu_blitz_delay_sec)),
            trash_talk_phrases=tuple(get('TRASH_TALK_PHRASES', defaults.trash_talk_phrases)),
            cpu_player_names=tuple(get('CPU_PLAYER_NAMES', defaults.cpu_player_names)),
            cpu_team_names=tuple(get('CPU_TEAM_NAMES', defaults.cpu_team_names)),
        )

    def public(self) -> Dict[str, Any]:
        """Client-visible configuration sent on join."""
        return {
            'features': {
                'teams': self.feature_teams,
                'cpuTeams': self.feature_cpu_teams,
                'trashTalk': self.feature_trash_talk,
                'teamVsTeam': self.feature_team_vs_team,
            },
            'game': {
                'roundsPerGame': self.rounds_per_game,
                'buttonCount': self.button_count,
                'pointsPerSecond': self.points_per_second,
                'defaultTimerSeconds': self.default_timer_seconds,
                'maxTeams': self.max_teams,
                'playersPerTeam': self.players_per_team,
                'blitzTimerSeconds': self.blitz_timer_seconds,
            },
            'trashTalkPhrases': list(self.trash_talk_phrases),
        }
