ROOMS_KEY = "session:rooms" # hash - room name -> room url
ROOM_MEMBERS_KEY = "session:members:{room_name}" # room name - set of display names, TTL = last requested expiry
ROOM_LOCK_KEY = "session:lock:{room_name}" # room name - held while a room is being provisioned

# **Lifecycle**
# - Mentor enter: HSETNX session:rooms {room} {url} under session:lock:{room}
# - Any enter: SADD session:members:{room} {name} + EXPIRE {minutes * 60}
# - Remove: HDEL session:rooms {room} + DEL session:members:{room}
