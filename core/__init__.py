"""Core functionality for Hue control.

This package contains:
- bridge: HueBridge class for API interaction
- discovery / ssdp: Finding bridges on the local network
- auth: Username validation and the link button handshake
- cache: Syncing bridge state into Light and Group objects
- transactions: Batching state changes into one request
- transport: HTTP+JSON requests to the bridge
- config: Settings from environment variables
- errors: Exception hierarchy
"""
