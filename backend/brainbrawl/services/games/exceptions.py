"""Typed rule violations raised by the roster and power-up rules.

The orchestrator catches GameRuleError at its boundary and turns it into
the targeted error event named by ``event``; nothing reaches the transport.
"""


class GameRuleError(Exception):
    event = 'game:error'

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TeamError(GameRuleError):
    event = 'team:error'


class BlitzError(GameRuleError):
    event = 'blitz:error'


class BeastModeError(GameRuleError):
    event = 'beastMode:error'
