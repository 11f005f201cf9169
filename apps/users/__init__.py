"""Users app package.

Defines the marketplace user: owners listing equipment and renters booking
it share one model. Use ``apps.users.models.User`` as the AUTH_USER_MODEL
throughout the project.
"""
