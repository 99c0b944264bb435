import os


def _flag(name, default='1'):
    return os.environ.get(name, default).lower() not in ('0', 'false', 'no', 'off')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    # Feature toggles
    FEATURE_TEAMS = _flag('FEATURE_TEAMS')
    FEATURE_CPU_TEAMS = _flag('FEATURE_CPU_TEAMS')
    FEATURE_TRASH_TALK = _flag('FEATURE_TRASH_TALK')
    FEATURE_TEAM_VS_TEAM = _flag('FEATURE_TEAM_VS_TEAM')
    # Match rules
    ROUNDS_PER_GAME = int(os.environ.get('ROUNDS_PER_GAME', '10'))
    BUTTON_COUNT = 3
    POINTS_PER_SECOND = int(os.environ.get('POINTS_PER_SECOND', '1'))
    DEFAULT_TIMER_SECONDS = int(os.environ.get('DEFAULT_TIMER_SECONDS', '30'))
    MAX_TEAMS = 2
    PLAYERS_PER_TEAM = int(os.environ.get('PLAYERS_PER_TEAM', '4'))
    BLITZ_TIMER_SECONDS = int(os.environ.get('BLITZ_TIMER_SECONDS', '3'))
    # Auto-advance timers (seconds). LEADERBOARD_DURATION_SEC=0 leaves rounds to the admin.
    SPLASH_DURATION_SEC = int(os.environ.get('SPLASH_DURATION_SEC', '5'))
    LEADERBOARD_DURATION_SEC = int(os.environ.get('LEADERBOARD_DURATION_SEC', '8'))
    # CPU behaviour
    CPU_ANSWER_WINDOW = float(os.environ.get('CPU_ANSWER_WINDOW', '0.7'))
    CPU_BLITZ_CHANCE_PER_ROUND = float(os.environ.get('CPU_BLITZ_CHANCE_PER_ROUND', '0.1'))
    CPU_BLITZ_DELAY_SEC = int(os.environ.get('CPU_BLITZ_DELAY_SEC', '2'))
    TRASH_TALK_PHRASES = [
        "Nice try!",
        "We got this!",
        "Bring it on!",
        "Too slow!",
        "Easy win!",
        "Good luck!",
        "Is that all?",
        "Watch and learn!",
        "Game on!",
        "You'll get 'em next time!",
    ]
    CPU_PLAYER_NAMES = ['BotAlpha', 'BotBeta', 'RoboOne', 'RoboTwo', 'Circuit', 'Gizmo', 'Sprocket', 'Widget']
    CPU_TEAM_NAMES = ['CPU Crushers', 'AI Avengers']
