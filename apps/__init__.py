"""Django apps of the AgriRent marketplace."""
