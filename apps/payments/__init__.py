"""Payments app package.

Talks to the Razorpay-style gateway, reconciles the two confirmation paths
(client verification and server webhook) into the booking state machine and
stores a receipt for every captured payment.
"""
