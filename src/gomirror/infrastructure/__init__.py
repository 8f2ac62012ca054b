"""Infrastructure - logging and HTTP plumbing."""
