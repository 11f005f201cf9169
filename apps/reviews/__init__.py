"""Reviews app package.

Renters rate equipment after a paid rental. Each paid booking grants
exactly one review.
"""
