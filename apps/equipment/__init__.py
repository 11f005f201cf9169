"""Equipment app package.

Agricultural machinery listed by owners, the availability ledger that
decides whether a machine can be booked for a day range, and the
recommendation score shown to renters.
"""
