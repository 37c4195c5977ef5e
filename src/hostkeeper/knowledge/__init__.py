"""Host administration knowledge base.

Contains the file templates hostkeeper writes and the baseline control
definitions it reconciles.
"""

from hostkeeper.knowledge.controls import (
    certificate_client_control,
    container_runtime_control,
    hardening_baseline,
    web_server_control,
)
from hostkeeper.knowledge.templates import (
    MANAGED_MARKER,
    render_default_page,
    render_site_config,
)

__all__ = [
    "MANAGED_MARKER",
    "certificate_client_control",
    "container_runtime_control",
    "hardening_baseline",
    "render_default_page",
    "render_site_config",
    "web_server_control",
]
