"""
Application layer

Checkout handoff DTOs built on top of the cart domain.
"""
