"""Infrastructure layer: host collaborators and scheduling."""
