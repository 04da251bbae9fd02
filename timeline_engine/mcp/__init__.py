"""MCP (Model Context Protocol) server for the timeline engine.

Lets an AI assistant drive the composition through the same command
surface as the editor, by calling the HTTP API.

Requirements:
    pip install mcp httpx
"""
