"""
Shared package for the chat relay server.

This package contains the pieces both ends of the wire agree on:
- Control message tokens and reserved labels
- Reply line builders
- The newline-delimited wire codec
"""
