"""Shared FastMCP instance.

`server.py` can run as `__main__` under `python -m`, so tool modules import
`mcp` from here to register on the same instance the server runs.
"""

from mcp.server.fastmcp import FastMCP

mcp = FastMCP(
    "Transit Directions",
    instructions="Walk and bus itineraries between two coordinates on a fixed transit network",
)
