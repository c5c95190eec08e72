"""Output layer: render command results for humans (Rich) or machines (JSON)."""
