# inbound (client -> relay)
HOST = "host"
JOIN = "join"
OFFER = "offer"
ANSWER = "answer"
ICE_CANDIDATE = "ice-candidate"
DISCONNECT = "disconnect"  # synthesized by the transport when a socket closes

# outbound (relay -> client)
HOST_READY = "host-ready"
JOIN_SUCCESS = "join-success"
JOINER_CONNECTED = "joiner-connected"
PEER_DISCONNECTED = "peer-disconnected"
ERROR = "error"

# `error` payloads
ROOM_NOT_FOUND_MESSAGE = "Room does not exist"
ROOM_FULL_MESSAGE = "Room full"

# **Frame format**
# - every frame is a JSON object `{"event": <name>, "data": <payload>}`
# - `host` / `join` data is the room id string
# - `offer` / `answer` / `ice-candidate` data is `{"roomId": ..., "<kind>": <opaque>}`
# - outbound offer/answer/candidate data is the opaque blob alone
