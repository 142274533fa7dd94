#!/usr/bin/env python3
"""
Chat Relay Server - Main Entry Point

Usage:
    python main_server.py --port 50048

Optional arguments:
    --port PORT, -port PORT   TCP port to listen on (default: 50048)
    --host HOST               Bind address (default: 0.0.0.0)
    --log-level LEVEL         DEBUG, INFO, WARNING or ERROR (default: INFO)
    --log-file PATH           Also write the operational log to PATH
"""

if __name__ == "__main__":
    from relay_server.main_server import main

    main()
