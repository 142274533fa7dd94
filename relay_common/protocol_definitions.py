"""
Protocol definitions for the chat relay server.

This module defines the text of every line the server sends to a client.
Each server notice is prefixed with the server label so clients can tell
server notices apart from relayed chat.
"""

from typing import List, Optional

from relay_common.constants import (
    SERVER_LABEL, ECHO_LABEL, LISTENER_SPECIFIER
)


def create_server_message(text: str) -> str:
    """Create a line attributed to the server."""
    return f"{SERVER_LABEL}: {text}"


# Connection lifecycle

def create_welcome_message(ip_addr: str, hostname: str, port: int) -> str:
    """Create the greeting sent on connect."""
    return create_server_message(f"Welcome from {ip_addr}/{hostname}:{port}")


def create_default_name_message(name: str) -> str:
    """Create the default name notice sent on connect."""
    return create_server_message(f"You've been given the default name: {name}")


def create_goodbye_message(name: str) -> str:
    """Create the reply to a disconnect request."""
    return create_server_message(f"CLOSING CONNECTION. SEE YOU LATER, {name}")


# Names

def create_name_set_message(name: str) -> str:
    return create_server_message(f"Your username has been set to \"{name}\"")


def create_name_unchanged_message(name: str) -> str:
    return create_server_message(f"The username \"{name}\" is your current username.")


def create_name_reserved_message(name: str) -> str:
    return create_server_message(f"The username \"{name}\" is reserved. Pick another")


def create_name_blank_message() -> str:
    return create_server_message("Whitespace-only usernames are not permitted. Pick another")


def create_name_in_use_message(name: str) -> str:
    return create_server_message(f"The username \"{name}\" is already in use. Choose another.")


def create_peer_renamed_message(new_name: str) -> str:
    """Create the notice a peer receives when its partner renames."""
    return create_server_message(f"Your peer has changed their name to: \"{new_name}\".")


# Queries

def create_my_name_message(name: str) -> str:
    return create_server_message(f"Your name is: \"{name}\"")


def create_peer_name_message(peer_name: str) -> str:
    if peer_name == LISTENER_SPECIFIER:
        return create_server_message(
            f"You are not connected to another user; your peer's name is: {LISTENER_SPECIFIER}"
        )
    return create_server_message(f"Your peer's name is: {peer_name}")


def create_client_list_message(names: List[str]) -> str:
    """Create the comma-joined list of connected client names."""
    return create_server_message(f"Clients connected to the server: {', '.join(names)}")


def create_invalid_control_message(line: str) -> str:
    return create_server_message(f"\"{line}\" is not a valid control message")


# Pairing

def create_connected_message(other_name: str) -> str:
    """Create the confirmation both sides receive when paired."""
    return create_server_message(f"You are now connected with \"{other_name}\"")


def create_already_connected_message(peer_name: str) -> str:
    return create_server_message(f"You're already chatting with \"{peer_name}\".")


def create_now_listening_message(former_peer_name: str) -> str:
    return create_server_message(
        f"Disconnected from \"{former_peer_name}\". You are now in listen mode."
    )


def create_already_listening_message() -> str:
    return create_server_message("You are now in listen mode.")


def create_peer_absent_message(target_name: str, former_peer_name: Optional[str] = None) -> str:
    text = f"The desired client, \"{target_name}\" is not connected to the server. Try again later."
    if former_peer_name is not None:
        text += f" You are now being disconnected from \"{former_peer_name}\""
    return create_server_message(text)


def create_peer_busy_message(target_name: str, target_peer_name: str,
                             former_peer_name: Optional[str] = None) -> str:
    text = (f"The desired client, \"{target_name}\" is chatting with the user "
            f"\"{target_peer_name}\". Try again later.")
    if former_peer_name is not None:
        text += f" You are now being disconnected from \"{former_peer_name}\""
    return create_server_message(text)


def create_self_pairing_message() -> str:
    return create_server_message("You can't connect to yourself.")


def create_being_disconnected_message(peer_name: str) -> str:
    """Create the notice a requester receives before its pairing is torn down."""
    return create_server_message(f"You are now being disconnected from \"{peer_name}\"")


def create_peer_left_message(name: str) -> str:
    """Create the notice a peer receives when its partner leaves the pairing."""
    return create_server_message(
        f"User \"{name}\" has exited the chat. You are now in listen mode."
    )


# Chat

def create_echo_message(text: str) -> str:
    """Create the echo a listening client receives for its own chat."""
    return f"{ECHO_LABEL}: {text}"


def create_relayed_message(sender_name: str, text: str) -> str:
    """Create the line a peer receives for relayed chat."""
    return f"{sender_name}: {text}"
