"""HTTP API - FastAPI application and versioned routers."""
