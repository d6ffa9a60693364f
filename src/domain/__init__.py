"""Domain layer: request DTOs, the post metadata document and pagination."""
