"""
DataSF MCP server package

Socrata catalog/query access with schema-cache-backed query correction.
"""

__version__ = "1.0.0"
