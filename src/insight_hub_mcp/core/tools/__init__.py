"""Tool modules discovered by insight_hub_mcp.core.registry."""
