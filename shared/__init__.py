"""
Shared Kernel

Base classes and utilities shared by the equipment, booking, payment and
review contexts: domain events, the domain error taxonomy, the message bus
and the unit of work that publishes events after commit.
"""
