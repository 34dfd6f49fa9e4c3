"""realtime-relay — transparent WebSocket relay for real-time APIs.

Sits between a local client and a remote real-time WebSocket service,
forwarding frames unmodified in both directions while attaching the
upstream credentials the client should never hold.
"""

__version__ = "0.1.0"
