"""Output layer — rich and JSON rendering of ServiceResult for the CLI."""
