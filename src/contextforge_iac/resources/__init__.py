# ABOUTME: Managed resources package for the ContextForge declarative client
# ABOUTME: Collects the per-kind descriptors run by the generic reconciler

"""
ContextForge Managed Resources Package

    - base.py: ResourceKind descriptor and the ManagedResource reconciler
    - gateway.py, server.py, tool.py, mcp_resource.py, prompt.py, root.py:
      one descriptor per kind
"""

from contextforge_iac.resources.base import ManagedResource, ResourceKind
from contextforge_iac.resources.gateway import GATEWAY, GatewayModel
from contextforge_iac.resources.mcp_resource import RESOURCE, ResourceModel
from contextforge_iac.resources.prompt import PROMPT, PromptModel
from contextforge_iac.resources.root import ROOT, RootModel
from contextforge_iac.resources.server import SERVER, ServerModel
from contextforge_iac.resources.tool import TOOL, ToolModel

# Registration order is the order the provider lists them in.
KINDS: tuple[ResourceKind, ...] = (GATEWAY, SERVER, TOOL, RESOURCE, PROMPT, ROOT)

__all__ = [
    "GATEWAY",
    "KINDS",
    "PROMPT",
    "RESOURCE",
    "ROOT",
    "SERVER",
    "TOOL",
    "GatewayModel",
    "ManagedResource",
    "PromptModel",
    "ResourceKind",
    "ResourceModel",
    "RootModel",
    "ServerModel",
    "ToolModel",
]
