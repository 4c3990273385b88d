"""
Integrations Module

Clients for external household-organizer services.
"""
