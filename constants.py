import os

REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", 6379))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD", None)
REDIS_SOCKET_TIMEOUT_SECONDS = float(os.getenv("REDIS_SOCKET_TIMEOUT_SECONDS", 5))

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./live_session.db")
DATABASE_TIMEOUT_SECONDS = float(os.getenv("DATABASE_TIMEOUT_SECONDS", 5))

DAILY_API_URL = os.getenv("DAILY_API_URL", "https://api.daily.co/v1")
DAILY_API_KEY = os.getenv("DAILY_API_KEY", "")
DAILY_ROOM_PRIVACY = os.getenv("DAILY_ROOM_PRIVACY", "public")
DAILY_TIMEOUT_SECONDS = float(os.getenv("DAILY_TIMEOUT_SECONDS", 10))

# Lock hold time must outlast a provisioning call
ROOM_LOCK_TIMEOUT_SECONDS = float(os.getenv("ROOM_LOCK_TIMEOUT_SECONDS", DAILY_TIMEOUT_SECONDS + 5))
ROOM_LOCK_WAIT_SECONDS = float(os.getenv("ROOM_LOCK_WAIT_SECONDS", DAILY_TIMEOUT_SECONDS + 5))

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8000))
RELOAD = os.getenv("RELOAD", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)
