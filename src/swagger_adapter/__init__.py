"""Swagger/OpenAPI driven operation catalog and request execution."""
