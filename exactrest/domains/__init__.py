"""Domain layer: value types shared by API models.

Domain modules should not depend on the HTTP client.
"""
