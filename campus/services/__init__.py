"""
High-level use cases for the campus site.

Each service module orchestrates the store and external collaborators
(git mirror, upload directory, signed session tokens). Routers call these
services instead of manipulating the JSON file directly.
"""
