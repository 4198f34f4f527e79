"""
signup - Account registration with signed email-link verification.
"""
