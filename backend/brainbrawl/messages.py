"""Wire protocol: inbound intents and outbound events.

Both directions are closed sets of pydantic models. Inbound socket events
are validated into intents by ``parse_intent``; payloads that fail
validation come back as None and are dropped. Outbound events carry their
socket event name and dump to camelCase payloads.
"""
from typing import Annotated, Any, ClassVar, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, StrictInt, StringConstraints, ValidationError
from pydantic.alias_generators import to_camel

from brainbrawl.services.games.exceptions import GameRuleError

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=32)]


class WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


# ---- inbound ----

class Intent(WireModel):
    admin_only: ClassVar[bool] = False


class JoinIntent(Intent):
    name: Name


class AnswerIntent(Intent):
    # StrictInt: a client sending true is not sending 1
    button_index: StrictInt


class CreateTeamIntent(Intent):
    team_name: Name


class JoinTeamIntent(Intent):
    team_id: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]


class TrashTalkIntent(Intent):
    phrase_index: StrictInt


class UseBlitzIntent(Intent):
    pass


class UseBeastModeIntent(Intent):
    pass


class AdminJoinIntent(Intent):
    pass


class SetTimerIntent(Intent):
    admin_only: ClassVar[bool] = True
    seconds: StrictInt


class ForceStartRoundIntent(Intent):
    admin_only: ClassVar[bool] = True


class StartGameIntent(Intent):
    admin_only: ClassVar[bool] = True


class ResetGameIntent(Intent):
    admin_only: ClassVar[bool] = True


class DisconnectIntent(Intent):
    pass


INTENT_MODELS: Dict[str, Type[Intent]] = {
    'player:join': JoinIntent,
    'player:answer': AnswerIntent,
    'player:createTeam': CreateTeamIntent,
    'player:joinTeam': JoinTeamIntent,
    'player:trashTalk': TrashTalkIntent,
    'player:useBlitz': UseBlitzIntent,
    'player:useBeastMode': UseBeastModeIntent,
    'admin:join': AdminJoinIntent,
    'admin:setTimer': SetTimerIntent,
    'admin:startRound': ForceStartRoundIntent,
    'admin:startGame': StartGameIntent,
    'admin:resetGame': ResetGameIntent,
}


def parse_intent(event: str, data: Any) -> Optional[Intent]:
    model = INTENT_MODELS.get(event)
    if model is None:
        return None
    if not isinstance(data, dict):
        data = {}
    try:
        return model.model_validate(data)
    except ValidationError:
        return None


# ---- outbound ----

class Event(WireModel):
    name: ClassVar[str] = ''

    def payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class RoundStarted(Event):
    name: ClassVar[str] = 'round:started'
    round: int
    total_rounds: int
    timer_length: float
    question_text: str
    candidate_answers: List[int]
    is_blitzed: bool = False


class PlayerAnswered(Event):
    name: ClassVar[str] = 'player:answered'
    player_id: str
    player_name: str


class RoundEnded(Event):
    name: ClassVar[str] = 'round:ended'
    correct_position: int
    correct_value: int
    per_player_breakdown: List[dict]
    leaderboard: dict
    round: int
    total_rounds: int
    beast_mode_team: Optional[str]
    beast_mode_actor: Optional[str]
    beast_mode_multiplier: Optional[int]
    power_ups: dict


class GameSplash(Event):
    """Both team cards; None for each when teams are switched off."""
    name: ClassVar[str] = 'game:splash'
    team1: Optional[dict] = None
    team2: Optional[dict] = None


class GameFinished(Event):
    name: ClassVar[str] = 'game:finished'
    leaderboard: dict


class GameReset(Event):
    name: ClassVar[str] = 'game:reset'


class BlitzActivated(Event):
    name: ClassVar[str] = 'blitz:activated'
    actor: str
    actor_team: str
    target_team: str
    seconds: int


class BeastModeActivated(Event):
    name: ClassVar[str] = 'beastMode:activated'
    actor: str
    team: str


class TrashTalk(Event):
    name: ClassVar[str] = 'chat:trashTalk'
    player_id: str
    player_name: str
    phrase: str
    timestamp: float


class GameStateSnapshot(Event):
    name: ClassVar[str] = 'game:state'
    snapshot: dict

    def payload(self):
        return self.snapshot


class AdminState(GameStateSnapshot):
    name: ClassVar[str] = 'admin:state'


class PlayerJoined(Event):
    name: ClassVar[str] = 'player:joined'
    assigned_id: str
    config: dict


class AnswerRecorded(Event):
    name: ClassVar[str] = 'answer:recorded'
    button_index: int


class RuleViolation(Event):
    """Targeted rejection; the event name comes from the rule that was broken."""
    message: str
    event: str = 'game:error'

    def payload(self):
        return {'message': self.message}

    @classmethod
    def from_error(cls, exc: GameRuleError) -> 'RuleViolation':
        return cls(message=exc.message, event=exc.event)


class AdminInitialized(Event):
    name: ClassVar[str] = 'admin:initialized'
    config: dict


class AdminTimerUpdated(Event):
    name: ClassVar[str] = 'admin:timerUpdated'
    seconds: int


def event_name(event: Event) -> str:
    if isinstance(event, RuleViolation):
        return event.event
    return event.name
