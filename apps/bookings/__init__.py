"""Bookings app package.

Holds the booking model and the state machine that moves a rental from
awaiting payment to paid or failed, keeping equipment availability in step.
"""
