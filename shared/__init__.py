"""
Entities, enums and the event protocol shared across the client.
"""
