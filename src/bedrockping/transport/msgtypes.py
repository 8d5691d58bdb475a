# Offline message packet ids
ID_UNCONNECTED_PING = 0x01
ID_UNCONNECTED_PONG = 0x1C

# Default Minecraft Bedrock/MCPE server port
DEFAULT_PORT = 19132
