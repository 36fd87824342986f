"""Output layer: JSON and Rich rendering of ServiceResult."""
