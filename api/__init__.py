"""HTTP layer: routers, schemas, middleware and dependencies."""
