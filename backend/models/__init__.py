"""
Models

- models.domain: dataclasses used by repositories and services
- models.api: pydantic request/response schemas used by the HTTP layer
"""
