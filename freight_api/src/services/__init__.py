"""Business logic services.

This package contains service classes that implement business logic
spanning repositories, such as account registration and token handling.
"""
