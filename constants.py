import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3000))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

# 0 disables idle-room eviction
ROOM_IDLE_TIMEOUT = float(os.getenv("ROOM_IDLE_TIMEOUT", 0))
ROOM_SWEEP_INTERVAL = float(os.getenv("ROOM_SWEEP_INTERVAL", 60))

HEALTH_MESSAGE = os.getenv("HEALTH_MESSAGE", "Signaling server is running.")
