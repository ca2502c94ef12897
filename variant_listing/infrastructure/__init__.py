"""Infrastructure layer - configuration, logging and catalog collaborators."""
