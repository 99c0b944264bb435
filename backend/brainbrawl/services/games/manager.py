import functools
import logging
import random
import threading
import time
from typing import Callable, Optional

from brainbrawl.messages import (
    AdminInitialized, AdminJoinIntent, AdminTimerUpdated, AnswerIntent, AnswerRecorded,
    BeastModeActivated, BlitzActivated, CreateTeamIntent, DisconnectIntent,
    ForceStartRoundIntent, GameFinished, GameReset, GameSplash, Intent, JoinIntent,
    JoinTeamIntent, PlayerAnswered, PlayerJoined, ResetGameIntent, RoundEnded,
    RoundStarted, RuleViolation, SetTimerIntent, StartGameIntent, TrashTalk,
    TrashTalkIntent, UseBeastModeIntent, UseBlitzIntent,
)
from brainbrawl.models import Answer, GameState, Match, Player, Round, Team
from .broadcaster import Broadcaster
from .exceptions import GameRuleError, TeamError
from .powerups import PowerUpState, activate_beast_mode, activate_blitz, cpu_blitz_chance
from .questions import generate_question
from .roster import Roster
from .scheduler import StageScheduler
from .scoring import build_leaderboard, score_current_round
from .settings import GameSettings

ROUND_END = 'round_end'
SPLASH = 'splash'
ADVANCE = 'advance'


def _serialized(method):
    """Run under the manager lock so socket handlers and timers never interleave."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


class GameManager:
    """Authoritative match state machine.

    lobby -> splash -> playing -> leaderboard -> playing ... -> finished,
    and back to lobby on reset. Every mutation republishes the snapshot.
    Timers are keyed by purpose and their callbacks re-check the match
    generation and round number before touching state, so a timer armed
    before a reset or a newer round is a no-op.
    """

    def __init__(self, settings: GameSettings, broadcaster: Broadcaster, scheduler: StageScheduler,
                 clock: Callable[[], float] = time.monotonic, rng: Optional[random.Random] = None,
                 wall_clock: Callable[[], float] = time.time, logger=None):
        self.settings = settings
        self.broadcaster = broadcaster
        self.scheduler = scheduler
        self.roster = Roster(settings)
        self.match = Match(timer_length=settings.default_timer_seconds)
        self.powerups = PowerUpState()
        self.logger = logger or logging.getLogger(__name__)
        self._clock = clock
        self._wall_clock = wall_clock
        self._rng = rng or random.Random()
        self._lock = threading.RLock()
        self._handlers = {
            JoinIntent: lambda sid, i: self.add_player(sid, i.name),
            AnswerIntent: lambda sid, i: self.submit_answer(sid, i.button_index),
            CreateTeamIntent: self._on_create_team,
            JoinTeamIntent: self._on_join_team,
            TrashTalkIntent: self._on_trash_talk,
            UseBlitzIntent: lambda sid, i: self.use_blitz(sid),
            UseBeastModeIntent: lambda sid, i: self.use_beast_mode(sid),
            AdminJoinIntent: lambda sid, i: self.add_admin(sid),
            SetTimerIntent: lambda sid, i: self.set_timer_length(i.seconds),
            ForceStartRoundIntent: lambda sid, i: self.force_advance(),
            StartGameIntent: lambda sid, i: self.start_game(),
            ResetGameIntent: lambda sid, i: self.reset_game(),
            DisconnectIntent: lambda sid, i: self.remove_player(sid),
        }
        missing = set(Intent.__subclasses__()) - set(self._handlers)
        if missing:
            raise TypeError(f"No handler for intents: {sorted(cls.__name__ for cls in missing)}")

    # ---- intent dispatch ----

    def handle(self, sid: str, intent: Intent) -> None:
        if intent.admin_only and sid not in self.broadcaster.admins:
            self.logger.debug(f"[reject] sid={sid} intent={type(intent).__name__} not an admin")
            return
        self._handlers[type(intent)](sid, intent)

    def _on_create_team(self, sid, intent):
        if self.settings.feature_teams:
            self.create_team(sid, intent.team_name)

    def _on_join_team(self, sid, intent):
        if self.settings.feature_teams:
            self.join_team(sid, intent.team_id)

    def _on_trash_talk(self, sid, intent):
        if self.settings.feature_trash_talk:
            self.send_trash_talk(sid, intent.phrase_index)

    def _reject(self, player_id: str, exc: GameRuleError) -> None:
        self.logger.debug(f"[reject] player={player_id} {exc.event}: {exc.message}")
        player = self.roster.get_player(player_id)
        if player and player.is_cpu:
            return
        self.broadcaster.to_connection(player_id, RuleViolation.from_error(exc))

    # ---- connections ----

    @_serialized
    def add_player(self, sid: str, name: str) -> Player:
        player = self.roster.add_player(sid, name)
        self.logger.info(f"[join] player={sid} name={name!r}")
        self.broadcaster.to_connection(sid, PlayerJoined(assigned_id=sid, config=self.settings.public()))
        self.broadcast_state()
        return player

    @_serialized
    def remove_player(self, sid: str) -> bool:
        self.broadcaster.admins.discard(sid)
        if not self.roster.remove_player(sid):
            return False
        self.logger.info(f"[leave] player={sid}")
        self.broadcast_state()
        return True

    @_serialized
    def add_admin(self, sid: str) -> None:
        self.broadcaster.admins.add(sid)
        self.broadcaster.to_connection(sid, AdminInitialized(config=self.settings.public()))
        self.broadcast_state()

    # ---- teams ----

    @_serialized
    def create_team(self, player_id: str, name: str) -> Optional[Team]:
        try:
            self._require_lobby()
            team = self.roster.create_team(player_id, name)
        except TeamError as exc:
            self._reject(player_id, exc)
            return None
        if team:
            self.logger.info(f"[team-create] team={team.id} name={team.name!r} by={player_id}")
            self.broadcast_state()
        return team

    @_serialized
    def join_team(self, player_id: str, team_id: str) -> Optional[Team]:
        try:
            self._require_lobby()
            team = self.roster.join_team(player_id, team_id)
        except TeamError as exc:
            self._reject(player_id, exc)
            return None
        if team:
            self.logger.info(f"[team-join] team={team.id} player={player_id}")
            self.broadcast_state()
        return team

    def _require_lobby(self):
        if self.match.state != GameState.LOBBY:
            raise TeamError('Teams are locked once the match has started')

    @_serialized
    def fill_teams_with_cpu(self):
        teams = self.roster.fill_with_cpu()
        self.logger.info(f"[cpu-fill] teams={[(t.name, len(t.members)) for t in teams]}")
        return teams

    # ---- admin ----

    @_serialized
    def set_timer_length(self, seconds: int) -> bool:
        if seconds < 1:
            self.logger.debug(f"[reject] timer length {seconds}")
            return False
        self.match.timer_length = seconds
        self.broadcaster.to_admins(AdminTimerUpdated(seconds=seconds))
        self.broadcast_state()
        return True

    @_serialized
    def force_advance(self) -> None:
        state = self.match.state
        if state == GameState.PLAYING:
            self.end_round()
        elif state in (GameState.SPLASH, GameState.LEADERBOARD):
            self.start_round()

    # ---- match lifecycle ----

    @_serialized
    def start_game(self) -> bool:
        if self.match.state != GameState.LOBBY:
            return False
        self.scheduler.cancel_all()
        self.match.generation += 1
        self.match.current_round = 0
        self.match.round = None
        self.powerups.reset_match()
        self.roster.reset_scores()
        for player in self.roster.players.values():
            player.attempts = 0
            player.correct = 0
        if self.settings.feature_teams:
            if self.settings.feature_cpu_teams:
                self.fill_teams_with_cpu()
            else:
                self.roster.seat_free_agents()

        self.match.state = GameState.SPLASH
        teams = list(self.roster.teams.values())
        self.broadcaster.to_all(GameSplash(
            team1=self._team_card(teams[0]) if len(teams) > 0 else None,
            team2=self._team_card(teams[1]) if len(teams) > 1 else None,
        ))
        self.logger.info(f"[game-start] generation={self.match.generation} teams={len(teams)}")
        self.broadcast_state()
        self.scheduler.schedule(SPLASH, self.settings.splash_duration_sec, self._on_splash_done,
                                self.match.generation)
        return True

    @_serialized
    def start_round(self) -> bool:
        match = self.match
        if match.state not in (GameState.SPLASH, GameState.LEADERBOARD):
            return False
        if match.current_round >= self.settings.rounds_per_game:
            self.end_game()
            return False

        self.scheduler.cancel(SPLASH)
        self.scheduler.cancel(ADVANCE)
        match.current_round += 1
        self.powerups.start_round()
        match.round = Round(
            number=match.current_round,
            question=generate_question(self._rng),
            started_at=self._clock(),
            timer_length=match.timer_length,
        )
        match.state = GameState.PLAYING
        self.logger.info(
            f"[round-start] round={match.current_round}/{self.settings.rounds_per_game} "
            f"timer={match.timer_length} question={match.round.question.text!r}"
        )
        self._dispatch_round()
        if self.settings.feature_cpu_teams:
            for player in self.roster.cpu_players():
                self._schedule_cpu_answer(player)
            self._roll_cpu_blitz()
        self.scheduler.schedule(ROUND_END, match.timer_length, self._on_round_timeout,
                                match.generation, match.current_round)
        self.broadcast_state()
        return True

    @_serialized
    def submit_answer(self, player_id: str, button_index: int) -> bool:
        match = self.match
        if match.state != GameState.PLAYING or match.round is None:
            return False
        player = self.roster.get_player(player_id)
        if not player:
            return False
        current = match.round
        if player_id in current.answers:
            # First submission wins
            self.logger.debug(f"[answer-dup] player={player_id} round={current.number}")
            return False
        if not 1 <= button_index <= self.settings.button_count:
            return False
        now = self._clock()
        window_start, timer_length = current.window_for(player.team_id)
        if now - window_start > timer_length:
            self.logger.debug(f"[answer-late] player={player_id} round={current.number}")
            return False
        current.answers[player_id] = Answer(
            choice=button_index, timestamp=now, window_start=window_start, timer_length=timer_length,
        )
        if not player.is_cpu:
            self.broadcaster.to_connection(player_id, AnswerRecorded(button_index=button_index))
        self.broadcaster.to_all(PlayerAnswered(player_id=player.id, player_name=player.name))
        self.broadcast_state()
        return True

    @_serialized
    def end_round(self) -> bool:
        match = self.match
        if match.state != GameState.PLAYING or match.round is None:
            return False
        self.scheduler.cancel(ROUND_END)
        self._cancel_cpu_timers()
        match.state = GameState.LEADERBOARD
        current = match.round
        result = score_current_round(
            self.roster, current, self.powerups,
            self.settings.points_per_second, self.settings.feature_team_vs_team,
        )
        beast = self.powerups.beast_mode
        beast_team = self.roster.get_team(result.beast_mode_team)
        self.broadcaster.to_all(RoundEnded(
            correct_position=current.question.correct_position,
            correct_value=current.question.correct_value,
            per_player_breakdown=result.breakdown,
            leaderboard=self.leaderboard(),
            round=current.number,
            total_rounds=self.settings.rounds_per_game,
            beast_mode_team=beast_team.name if beast_team else None,
            beast_mode_actor=beast.actor_name if beast else None,
            beast_mode_multiplier=result.beast_mode_multiplier,
            power_ups=self.powerups.summary(self.roster.teams),
        ))
        self.logger.info(
            f"[round-end] round={current.number} answers={len(current.answers)} "
            f"team_points={result.team_points} beast_multiplier={result.beast_mode_multiplier}"
        )
        self.broadcast_state()
        if self.settings.leaderboard_duration_sec > 0:
            self.scheduler.schedule(ADVANCE, self.settings.leaderboard_duration_sec,
                                    self._on_leaderboard_done, match.generation, current.number)
        return True

    @_serialized
    def end_game(self) -> None:
        self.scheduler.cancel_all()
        self.match.state = GameState.FINISHED
        self.logger.info(f"[finish] finished at round={self.match.current_round}")
        self.broadcaster.to_all(GameFinished(leaderboard=self.leaderboard()))
        self.broadcast_state()

    @_serialized
    def reset_game(self) -> None:
        self.scheduler.cancel_all()
        match = self.match
        match.generation += 1
        match.current_round = 0
        match.round = None
        match.state = GameState.LOBBY
        self.powerups.reset_match()
        self.roster.reset()
        self.logger.info(f"[reset] generation={match.generation}")
        self.broadcaster.to_all(GameReset())
        self.broadcast_state()

    # ---- power-ups ----

    @_serialized
    def use_blitz(self, player_id: str) -> bool:
        player = self.roster.get_player(player_id)
        if not player:
            return False
        team = self.roster.team_of(player)
        target = self.roster.opponent_of(team.id) if team else None
        try:
            activate_blitz(self.powerups, player, team, target, self.match.state)
        except GameRuleError as exc:
            self._reject(player_id, exc)
            return False

        current = self.match.round
        seconds = self.settings.blitz_timer_seconds
        current.team_timers[target.id] = seconds
        current.team_window_start[target.id] = self._clock()
        self.logger.info(f"[blitz] actor={player.name!r} team={team.name!r} target={target.name!r}")
        self.broadcaster.to_all(BlitzActivated(
            actor=player.name, actor_team=team.name, target_team=target.name, seconds=seconds,
        ))
        self._dispatch_round(only_team=target)
        if self.settings.feature_cpu_teams:
            for member in self.roster.members(target):
                if member.is_cpu and member.id not in current.answers:
                    self._schedule_cpu_answer(member)
        self.broadcast_state()
        return True

    @_serialized
    def use_beast_mode(self, player_id: str) -> bool:
        player = self.roster.get_player(player_id)
        if not player:
            return False
        team = self.roster.team_of(player)
        try:
            activate_beast_mode(self.powerups, player, team, self.match.state)
        except GameRuleError as exc:
            self._reject(player_id, exc)
            return False
        self.logger.info(f"[beast-mode] actor={player.name!r} team={team.name!r} round={self.match.current_round}")
        self.broadcaster.to_all(BeastModeActivated(actor=player.name, team=team.name))
        self.broadcast_state()
        return True

    # ---- chat ----

    @_serialized
    def send_trash_talk(self, player_id: str, phrase_index: int) -> bool:
        player = self.roster.get_player(player_id)
        phrases = self.settings.trash_talk_phrases
        if not player or not 0 <= phrase_index < len(phrases):
            return False
        self.broadcaster.to_all(TrashTalk(
            player_id=player.id,
            player_name=player.name,
            phrase=phrases[phrase_index],
            timestamp=int(self._wall_clock() * 1000),
        ))
        return True

    # ---- timers ----

    def _is_current(self, generation: int, round_number: Optional[int] = None) -> bool:
        if self.match.generation != generation:
            return False
        return round_number is None or self.match.current_round == round_number

    @_serialized
    def _on_splash_done(self, generation: int) -> None:
        if self._is_current(generation) and self.match.state == GameState.SPLASH:
            self.start_round()

    @_serialized
    def _on_round_timeout(self, generation: int, round_number: int) -> None:
        if not self._is_current(generation, round_number):
            self.logger.info(f"[timer-abort] stale round timer round={round_number}")
            return
        self.end_round()

    @_serialized
    def _on_leaderboard_done(self, generation: int, round_number: int) -> None:
        if self._is_current(generation, round_number) and self.match.state == GameState.LEADERBOARD:
            self.start_round()

    @_serialized
    def _on_cpu_answer(self, generation: int, round_number: int, player_id: str) -> None:
        if self._is_current(generation, round_number) and self.match.state == GameState.PLAYING:
            self.submit_answer(player_id, self._rng.randint(1, self.settings.button_count))

    @_serialized
    def _on_cpu_blitz(self, generation: int, round_number: int, player_id: str) -> None:
        if self._is_current(generation, round_number) and self.match.state == GameState.PLAYING:
            self.use_blitz(player_id)

    def _schedule_cpu_answer(self, player: Player) -> None:
        _, timer_length = self.match.round.window_for(player.team_id)
        delay = self._rng.uniform(0, timer_length * self.settings.cpu_answer_window)
        self.scheduler.schedule(('cpu_answer', player.id), delay, self._on_cpu_answer,
                                self.match.generation, self.match.current_round, player.id)

    def _roll_cpu_blitz(self) -> None:
        chance = cpu_blitz_chance(self.match.current_round, self.settings.cpu_blitz_chance_per_round)
        for team in self.roster.teams.values():
            if not team.blitz_available:
                continue
            cpus = [p for p in self.roster.members(team) if p.is_cpu]
            if not cpus or self._rng.random() >= chance:
                continue
            self.scheduler.schedule(('cpu_blitz', team.id), self.settings.cpu_blitz_delay_sec,
                                    self._on_cpu_blitz, self.match.generation,
                                    self.match.current_round, cpus[0].id)

    def _cancel_cpu_timers(self) -> None:
        for player in self.roster.cpu_players():
            self.scheduler.cancel(('cpu_answer', player.id))
        for team_id in self.roster.teams:
            self.scheduler.cancel(('cpu_blitz', team_id))

    # ---- publishing ----

    def _round_started(self, timer_length, blitzed=False) -> RoundStarted:
        current = self.match.round
        return RoundStarted(
            round=current.number,
            total_rounds=self.settings.rounds_per_game,
            timer_length=timer_length,
            question_text=current.question.text,
            candidate_answers=list(current.question.answers),
            is_blitzed=blitzed,
        )

    def _dispatch_round(self, only_team: Optional[Team] = None) -> None:
        """Send round:started per team so each sees its own timer."""
        current = self.match.round
        for team in self.roster.teams.values():
            if only_team is not None and team.id != only_team.id:
                continue
            _, timer_length = current.window_for(team.id)
            event = self._round_started(timer_length, blitzed=team.id in current.team_timers)
            self.broadcaster.to_connections([p.id for p in self.roster.human_members(team)], event)
        if only_team is None:
            event = self._round_started(current.timer_length)
            teamless = [p.id for p in self.roster.human_players() if self.roster.team_of(p) is None]
            self.broadcaster.to_connections(teamless, event)
            self.broadcaster.to_admins(event)

    def _team_card(self, team: Team) -> dict:
        return {
            'id': team.id,
            'name': team.name,
            'isCPU': team.is_cpu,
            'members': [{'id': p.id, 'name': p.name, 'isCPU': p.is_cpu} for p in self.roster.members(team)],
        }

    @_serialized
    def leaderboard(self) -> dict:
        return build_leaderboard(self.roster, self.settings.feature_team_vs_team)

    @_serialized
    def snapshot(self) -> dict:
        match = self.match
        return {
            'gameState': match.state.value,
            'currentRound': match.current_round,
            'totalRounds': self.settings.rounds_per_game,
            'timerLength': match.timer_length,
            'players': [p.to_dict() for p in self.roster.players.values()],
            'teams': [t.to_dict() for t in self.roster.teams.values()],
            'powerUps': self.powerups.summary(self.roster.teams),
            'answeredCount': len(match.round.answers) if match.round else 0,
        }

    def broadcast_state(self) -> None:
        self.broadcaster.publish_state(self.snapshot())
