"""FunctionPoint Estimates MCP Server.

Exposes the FunctionPoint estimates API as a single MCP tool, GetAllEstimates,
over stdio or stateless Streamable HTTP.
"""

__version__ = "1.0.0"
