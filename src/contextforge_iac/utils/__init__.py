# ABOUTME: Utilities package initialization for the ContextForge declarative client
# ABOUTME: Contains the API client, wire models and logging helpers

"""
ContextForge Utilities Package

Shared utilities:
    - client.py: ContextForge admin API client
    - models.py: API entities and request payloads
    - logging.py: Structured logging with correlation IDs and redaction
"""
