"""
Shared constants for the chat relay server.

This module contains the protocol tokens and defaults used across components.
"""

# Network Configuration
DEFAULT_SERVER_HOST = '0.0.0.0'
DEFAULT_PORT = 50048

# Maximum length of a single protocol line (asyncio StreamReader limit)
READ_LIMIT = 64 * 1024

# Logging
LOGGER_NAME = 'relay_server'
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Participants
DEFAULT_NAME_PREFIX = 'DefaultName_'
LISTENER_SPECIFIER = 'Listener'

# Message origin labels
SERVER_LABEL = 'SVR'
SERVER_LOG_LABEL = 'SVR LOG'
ECHO_LABEL = 'LISTENER_MODE_ECHO'
CLIENT_SELF_LABEL = 'You'
GUI_LABEL = 'GUI'

# Every control message starts with this
CONTROL_MESSAGE_SPECIFIER = 'C0NTR0L:'


# Control commands (body of a control message)
class ControlCommands:
    SET_USERNAME = 'SET MY NAME='
    SET_PEER_NAME = 'CONNECT TO PEER WITH NAME='
    DISCONNECT_FROM_SERVER = 'DISCONNECT FROM SERVER'
    GET_LIST_OF_CONNECTED_CLIENTS = 'GET CONNECTED CLIENT NAMES'
    GET_MY_PEERS_NAME = "GET MY PEER'S NAME"
    GET_MY_NAME = 'GET MY NAME'

    # Commands followed by an argument after '='
    PARAMETERIZED = (SET_USERNAME, SET_PEER_NAME)

    # Matching order for parse_control_message()
    ALL = (
        SET_USERNAME,
        SET_PEER_NAME,
        DISCONNECT_FROM_SERVER,
        GET_LIST_OF_CONNECTED_CLIENTS,
        GET_MY_PEERS_NAME,
        GET_MY_NAME,
    )


# Names a client is not allowed to take
RESERVED_NAMES = frozenset({
    LISTENER_SPECIFIER,
    SERVER_LABEL,
    SERVER_LOG_LABEL,
    CONTROL_MESSAGE_SPECIFIER,
    CLIENT_SELF_LABEL,
    ECHO_LABEL,
    GUI_LABEL,
})
