"""Infrastructure layer: persistence of users and posts."""
