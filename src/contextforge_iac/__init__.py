# ABOUTME: ContextForge declarative client package initialization
# ABOUTME: Exposes version information and the provider entry point

"""
ContextForge IaC - declarative reconciliation for the ContextForge MCP gateway.

=============================================================================
WHAT IS CONTEXTFORGE?
=============================================================================

ContextForge is an MCP gateway and registry. It federates upstream MCP
gateways and serves a catalogue of:

- TOOLS: Invocable capabilities with a JSON-schema input
- RESOURCES: Addressable content, by URI
- PROMPTS: Parameterized prompt templates
- SERVERS: Virtual servers grouping tools into one endpoint
- ROOTS: Filesystem/URI boundaries

=============================================================================
WHAT DOES THIS PACKAGE DO?
=============================================================================

Operators DECLARE the objects they want. An orchestration engine diffs that
declaration against recorded state and calls the reconcilers here to create,
read, update or delete objects through ContextForge's admin REST API.

=============================================================================
PACKAGE STRUCTURE OVERVIEW
=============================================================================

contextforge_iac/
├── __init__.py          <- YOU ARE HERE: Package entry point
├── config.py            <- Endpoint, token and logging settings (env vars)
├── errors.py            <- Errors reported back to the engine
├── schema.py            <- Declared attributes and local validation
├── provider.py          <- Registry of resources and data lookups
├── utils/
│   ├── client.py        <- HTTP client for the ContextForge REST API
│   ├── logging.py       <- Structured logging, correlation IDs, redaction
│   └── models.py        <- API entities and request bodies
├── resources/           <- One managed resource kind per module
└── data_sources/        <- Read-only lookups
"""

__version__ = "0.1.0"

from contextforge_iac.provider import ContextForgeProvider  # noqa: E402

__all__ = ["ContextForgeProvider", "__version__"]
