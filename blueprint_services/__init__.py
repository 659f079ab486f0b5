"""Composition root: wires configuration, persistence and the kernel."""

from blueprint_services.bootstrap import open_app_state

__all__ = ["open_app_state"]
