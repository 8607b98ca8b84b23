"""HTTP API: routers, dependencies, and the response envelope."""
