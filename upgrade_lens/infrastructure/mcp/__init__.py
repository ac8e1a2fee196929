# MCP (Model Context Protocol) Infrastructure
#
# This module provides:
# - The JSON-RPC dispatcher for the MCP method table
# - The server facade holding tools, resources and prompts
# - The built-in upgrade documentation and code scanning tools
