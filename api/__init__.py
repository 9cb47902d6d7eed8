"""HTTP API over the prediction and simulation engine."""
