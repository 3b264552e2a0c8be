"""Gameplay constants shared across the server modules.

The values must match the browser client exactly.
"""

TICK_RATE: int = 60
BROADCAST_INTERVAL_TICKS: int = 10
SEND_TIMEOUT: float = 1.0

WORLD_WIDTH: float = 1600.0
WORLD_HEIGHT: float = 1200.0
SPAWN_MARGIN: float = 50.0
DEFAULT_SPAWN_X: float = 400.0
DEFAULT_SPAWN_Y: float = 300.0

PLAYER_RADIUS: float = 15.0
PLAYER_MAX_HEALTH: int = 100
PLAYER_MAX_SPEED: float = 5.0
DEFAULT_WEAPON: str = "pistol"
RESPAWN_DELAY_MS: int = 5000
KILL_BOUNTY: int = 100

MUZZLE_OFFSET: float = 20.0
BULLET_RADIUS: float = 3.0
BULLET_SPEED: float = 10.0
BULLET_DAMAGE: int = 25
BULLET_LIFETIME_TICKS: int = 120

WANTED_MAX: int = 5
WANTED_DECAY_MS: int = 30_000
WANTED_POLICE_THRESHOLD: int = 2
POLICE_PER_WANTED_LEVEL: int = 2
POLICE_SPAWN_BATCH: int = 2
POLICE_SPAWN_MIN_DISTANCE: float = 200.0
POLICE_SPAWN_MAX_DISTANCE: float = 500.0

POLICE_HEALTH: int = 75
POLICE_SPEED: float = 4.0
POLICE_RADIUS: float = 15.0
POLICE_AGGRO_RADIUS: float = 300.0
POLICE_SHOOT_RADIUS: float = 150.0
POLICE_STOP_DISTANCE: float = 100.0
POLICE_SHOOT_COOLDOWN_MS: int = 1500
POLICE_BULLET_DAMAGE: int = 20
POLICE_BOUNTY: int = 50
