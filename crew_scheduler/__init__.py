"""MCP adapter exposing conflict_core checks over stored job/technician snapshots."""
