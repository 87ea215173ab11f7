"""Django project configuration for the care dashboard backend."""
