"""
Kubectl MCP Server.

Exposes Kubernetes cluster operations as MCP tools by translating
structured tool calls into kubectl argument vectors and running them
as subprocesses.
"""

__version__ = "0.4.0"
